import json

from bs4 import BeautifulSoup

from shopscrape.normalizer import normalize
from shopscrape.structured import extract_structured, offer_price

PAGE = "https://shop.example/"


def page_with(*blocks) -> BeautifulSoup:
    scripts = "".join(
        f'<script type="application/ld+json">{b if isinstance(b, str) else json.dumps(b)}</script>' for b in blocks
    )
    return BeautifulSoup(f"<html><head>{scripts}</head><body></body></html>", "lxml")


def test_single_product_block():
    soup = page_with(
        {
            "@context": "https://schema.org",
            "@type": "Product",
            "name": "Widget",
            "description": "A very good widget",
            "image": ["https://cdn.example/w1.jpg", "https://cdn.example/w2.jpg"],
            "offers": {"@type": "Offer", "price": "9.99", "priceCurrency": "USD"},
        }
    )
    [record] = extract_structured(soup, PAGE)
    assert record["name"] == "Widget"
    assert record["price"] == "$9.99"
    assert record["imageUrl"] == "https://cdn.example/w1.jpg"
    assert record["description"] == "A very good widget"

    product = normalize(record)
    assert product.name == "Widget"
    assert product.price == "$9.99"
    assert product.metadata["priceCurrency"] == "USD"


def test_item_list_keeps_array_order():
    soup = page_with(
        {
            "@type": "ItemList",
            "itemListElement": [
                {"@type": "ListItem", "position": 1, "item": {"@type": "Product", "name": "First", "offers": {"price": 1}}},
                {"@type": "ListItem", "position": 2, "item": {"@type": "Thing", "name": "Not a product"}},
                {"@type": "Product", "name": "Second", "offers": {"price": 2, "priceCurrency": "GBP"}},
            ],
        }
    )
    records = extract_structured(soup, PAGE)
    assert [(r["name"], r["price"]) for r in records] == [("First", "$1"), ("Second", "£2")]


def test_offer_list_uses_first_entry_and_price_specification():
    assert offer_price([{"priceSpecification": {"price": "15.00"}, "priceCurrency": "EUR"}, {"price": "99"}]) == "€15.00"
    assert offer_price({"price": "19.99", "priceCurrency": "JPY"}) == "¥19.99"
    assert offer_price({"price": "19.99", "priceCurrency": "ZZZ"}) == "$19.99"
    assert offer_price({"@type": "AggregateOffer", "lowPrice": "4.50", "priceCurrency": "INR"}) == "₹4.50"
    assert offer_price({"availability": "InStock"}) is None


def test_malformed_block_is_skipped():
    soup = page_with("{not json", {"@type": "Product", "name": "Survivor", "offers": {"price": "3"}})
    records = extract_structured(soup, PAGE)
    assert [r["name"] for r in records] == ["Survivor"]


def test_graph_and_type_lists():
    soup = page_with(
        {
            "@graph": [
                {"@type": "WebPage", "name": "Catalog"},
                {"@type": ["Product", "IndividualProduct"], "name": "Graph Item", "image": {"url": "/g.jpg"}},
            ]
        }
    )
    [record] = extract_structured(soup, PAGE)
    assert record["name"] == "Graph Item"
    assert record["imageUrl"] == "/g.jpg"
    assert "price" not in record
    assert normalize(record).image_url == "https://shop.example/g.jpg"


def test_no_blocks_no_records():
    assert extract_structured(BeautifulSoup("<p>plain</p>", "lxml"), PAGE) == []
