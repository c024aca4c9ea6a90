from bs4 import BeautifulSoup

from shopscrape.detector import detect_containers, drop_nested, price_clusters


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def test_generic_catalog_keeps_document_order():
    page = soup("""
        <div class="product"><h3>A</h3></div>
        <div class="product"><h3>B</h3></div>
        <div class="product"><h3>C</h3></div>
    """)
    found = detect_containers(page, "https://shop.example/all")
    assert [c.h3.get_text() for c in found] == ["A", "B", "C"]


def test_first_generic_selector_with_matches_wins():
    page = soup("""
        <div class="product-card"><h3>Card</h3></div>
        <li class="list-item"><h3>Row</h3></li>
    """)
    found = detect_containers(page, "https://shop.example/all")
    assert len(found) == 1
    assert found[0].h3.get_text() == "Card"


def test_nested_match_reported_once():
    page = soup("""
        <div class="product" id="outer">
          <div class="product" id="inner"><h3>Lamp</h3></div>
        </div>
    """)
    found = detect_containers(page, "https://shop.example/all")
    assert [c["id"] for c in found] == ["outer"]


def test_site_catalog_beats_generic_patterns():
    page = soup("""
        <div class="product">banner</div>
        <div data-component-type="s-search-result" data-asin="A1"><h2>One</h2></div>
        <div data-component-type="s-search-result" data-asin="A2"><h2>Two</h2></div>
    """)
    found = detect_containers(page, "https://www.amazon.com/s?k=lamp")
    assert [c["data-asin"] for c in found] == ["A1", "A2"]


def test_site_catalog_ignored_for_other_hosts():
    page = soup("""
        <div data-component-type="s-search-result"><h2>One</h2></div>
        <div class="product"><h2>Generic</h2></div>
    """)
    found = detect_containers(page, "https://shop.example/")
    assert [c.h2.get_text() for c in found] == ["Generic"]


def test_price_clustering_picks_majority_tag():
    page = soup("""
        <ul>
          <li><span>$5.00</span><b>Mug</b></li>
          <li><span>$6.50</span><b>Cup</b></li>
          <li><span>$7</span><b>Jug</b></li>
        </ul>
    """)
    found = detect_containers(page, "https://shop.example/")
    assert [c.name for c in found] == ["li", "li", "li"]
    assert [c.b.get_text() for c in found] == ["Mug", "Cup", "Jug"]


def test_price_clustering_tie_goes_to_first_seen_tag():
    page = soup("<div><article><span>$1.00</span></article></div>")
    found = price_clusters(page)
    assert [c.name for c in found] == ["article"]


def test_price_clustering_ignores_script_text():
    page = soup("<script>var p = '$5.00';</script><p>nothing to buy</p>")
    assert price_clusters(page) == []


def test_last_resort_needs_image_and_text():
    page = soup("""
        <div><img src="a.jpg"><p>Walnut stool</p></div>
        <div><img src="spacer.gif"></div>
        <div><p>Just words</p></div>
    """)
    found = detect_containers(page, "https://shop.example/")
    assert len(found) == 1
    assert found[0].p.get_text() == "Walnut stool"


def test_nothing_found_returns_empty():
    assert detect_containers(soup("<p>Hello</p>"), "https://shop.example/") == []


def test_drop_nested_removes_duplicates():
    page = soup("<section><div id='a'></div><div id='b'></div></section>")
    a, b = page.find_all("div")
    assert [n["id"] for n in drop_nested([a, b, a])] == ["a", "b"]
