from document_html.text import escape_attribute, normalize_text


def test_normalize_text_smart_quotes() -> None:
    text = "It’s the year’s best “product” with ‘quotes’."
    assert normalize_text(text) == (
        "It&#8217;s the year&#8217;s best &#8220;product&#8221; with &#8216;quotes&#8217;."
    )


def test_normalize_text_dashes_and_ellipsis() -> None:
    assert normalize_text("2020–2024 — the years passed…") == (
        "2020&#8211;2024 &#8212; the years passed&#8230;"
    )


def test_normalize_text_escapes_markup_once() -> None:
    text = "<script>alert(’XSS’)</script> & other < > characters"
    assert normalize_text(text) == (
        "&lt;script&gt;alert(&#8217;XSS&#8217;)&lt;/script&gt; &amp; other &lt; &gt; characters"
    )


def test_normalize_text_leaves_other_characters() -> None:
    assert normalize_text("Café \"plain\" 'quotes'") == "Café \"plain\" 'quotes'"
    assert normalize_text("") == ""


def test_escape_attribute_quotes() -> None:
    assert escape_attribute("/rules?name=o'neil") == "/rules?name=o&#39;neil"


def test_escape_attribute_ampersands_and_brackets() -> None:
    assert escape_attribute("https://example.com/?a=1&b=<2>") == "https://example.com/?a=1&amp;b=&lt;2&gt;"
