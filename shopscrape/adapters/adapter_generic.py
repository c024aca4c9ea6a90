# adapter_generic.py
# Broad listing patterns, most specific first. The first selector with at
# least one match on the page is used on its own.
CONTAINER_SELECTORS = [
    # grid / list product cards
    ".product",
    ".product-item",
    ".product-card",
    ".item-product",
    ".product-grid-item",
    # marketplace-style result rows
    ".s-result-item",
    ".sg-col-inner",
    "[data-item-id]",
    ".search-result-gridview-item",
    ".sku-item",
    ".list-item",
    # anything that says product / item / card
    "[class*='product']",
    "[class*='item']",
    "[class*='card']",
    # grid cells
    ".col",
    ".grid-item",
    ".cell",
    ".box",
]
NEEDS_RENDER = False
