# adapter_bestbuy.py
# Listing grids are rendered client-side; the render service must run a browser.
CONTAINER_SELECTORS = [
    ".sku-item",
    "li.product-list-item",
    ".list-item",
]
NEEDS_RENDER = True
