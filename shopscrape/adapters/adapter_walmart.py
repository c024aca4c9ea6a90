# adapter_walmart.py
CONTAINER_SELECTORS = [
    "[data-item-id]",
    ".search-result-gridview-item",
    "[data-testid='list-view']",
]
NEEDS_RENDER = False
