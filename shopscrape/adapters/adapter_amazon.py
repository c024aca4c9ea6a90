# adapter_amazon.py
# Search and browse grids; spacer rows carry an empty data-asin.
CONTAINER_SELECTORS = [
    "[data-component-type='s-search-result']",
    ".s-result-item[data-asin]:not([data-asin=''])",
    ".s-result-item",
]
NEEDS_RENDER = False
