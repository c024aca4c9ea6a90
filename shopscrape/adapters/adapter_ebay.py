# adapter_ebay.py
CONTAINER_SELECTORS = [
    "li.s-item",
    ".s-item__wrapper",
]
NEEDS_RENDER = False
