# tests/test_extraction.py
from mcp_cloud_browser.actions import extract_json_objects, extract_structured_data, extract_text_content


def test_extract_json_objects_balanced_and_nested():
    text = 'prefix {"a": 1} middle {"b": {"c": [1, 2]}} suffix'
    assert extract_json_objects(text) == [{"a": 1}, {"b": {"c": [1, 2]}}]


def test_extract_json_objects_skips_invalid_candidates():
    text = "function f() { return 1; } then {\"ok\": true}"
    assert extract_json_objects(text) == [{"ok": True}]


def test_extract_json_objects_ignores_stray_closing_brace():
    assert extract_json_objects('} oops {"x": 1}') == [{"x": 1}]


def test_extract_json_objects_empty_input():
    assert extract_json_objects("") == []
    assert extract_json_objects(None) == []


PAGE = """
<html>
  <head>
    <meta name="config" content='{"theme": "dark"}'>
    <meta name="description" content="plain text">
    <script type="application/ld+json">{"@type": "Product", "name": "Widget"}</script>
    <script type="application/json">[1, 2, 3]</script>
    <script>window.__STATE__ = {"user": "ada"};</script>
  </head>
  <body>
    <div id="data">Inline {"price": 9.5} value</div>
    <p class="note">no json here</p>
  </body>
</html>
"""


def test_extract_structured_data_whole_page():
    data = extract_structured_data(PAGE)

    assert set(data) == {"textContent", "scriptTags", "metaTags", "jsonLd"}
    assert {"price": 9.5} in data["textContent"]
    assert [1, 2, 3] in data["scriptTags"]
    assert {"user": "ada"} in data["scriptTags"]
    assert data["metaTags"] == [{"theme": "dark"}]
    assert data["jsonLd"] == [{"@type": "Product", "name": "Widget"}]


def test_extract_structured_data_selector_limits_text_scan():
    data = extract_structured_data(PAGE, selector="p.note")
    assert data["textContent"] == []
    assert data["jsonLd"] == [{"@type": "Product", "name": "Widget"}]


def test_extract_structured_data_skips_malformed_json_ld():
    html = '<script type="application/ld+json">{not json}</script>'
    assert extract_structured_data(html)["jsonLd"] == []


def test_extract_text_content_with_selector():
    html = "<ul><li>one</li><li>two</li></ul><p>other</p>"
    assert extract_text_content(html, "li") == ["one", "two"]


def test_extract_text_content_without_selector_covers_every_element():
    html = "<div><span>hi</span></div>"
    assert extract_text_content(html) == ["hi", "hi"]


def test_extract_text_content_no_match():
    assert extract_text_content("<p>x</p>", ".missing") == []


def test_extract_text_content_includes_inline_script_and_style():
    html = "<div>a<script>var x = 1;</script><style>p{}</style><!-- note --></div>"
    assert extract_text_content(html, "div") == ["avar x = 1;p{}"]


def test_structured_data_text_scan_sees_inline_body_script():
    html = '<body><p>hello</p><script>window.cfg = {"mode": "live"};</script></body>'
    data = extract_structured_data(html)
    assert data["textContent"] == [{"mode": "live"}]
    assert data["scriptTags"] == [{"mode": "live"}]
