from basketwise.link import build_shopping_list_link


def test_single_item():
    assert build_shopping_list_link("1 liter halfvolle melk") == (
        "https://www.checkjebon.nl/#1%20liter%20halfvolle%20melk"
    )


def test_multiple_lines():
    url = build_shopping_list_link("1 liter melk\ntarwebrood")
    assert url.endswith("melk%0Atarwebrood")
    assert " " not in url
    assert url.count("%20") == 2


def test_sequence_and_line_endings():
    url = build_shopping_list_link(["a/b", "c,d\r\ne", "f\rg"], host="example.test")
    assert url == "https://example.test/#a%2Fb%0Ac,d%0Ae%0Af%0Ag"
