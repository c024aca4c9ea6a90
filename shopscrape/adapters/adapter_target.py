# adapter_target.py
CONTAINER_SELECTORS = [
    "[data-test='@web/site-top-of-funnel/ProductCardWrapper']",
    "[data-test='product-grid'] section",
]
NEEDS_RENDER = True
