import pytest

from producify.minify import minify_asset, minify_css, minify_html, minify_js
from producify.options import AssetKind


def test_minify_css_strips_comments_and_whitespace():
    out = minify_css("/* header */\nbody {\n    color: red;\n}\n")
    assert "header" not in out
    assert "\n" not in out
    assert out.startswith("body{color:red")


def test_minify_js_strips_comments():
    out = minify_js("// setup\nvar answer = 42;\n/* done */\n")
    assert "setup" not in out
    assert "done" not in out
    assert "var answer=42" in out


@pytest.mark.parametrize("kind", list(AssetKind))
def test_minify_asset_dispatch(kind):
    source = "a { color: blue; }" if kind is AssetKind.CSS else "var a = 1;"
    expected = minify_css(source) if kind is AssetKind.CSS else minify_js(source)
    assert minify_asset(kind, source) == expected


def test_collapse_removes_comments_and_keeps_closing_slash():
    html = "<html>\n  <body>\n    <!-- note -->\n    <p>Hello</p>\n    <br />\n  </body>\n</html>\n"
    out = minify_html(html)
    assert "note" not in out
    assert "<p>Hello</p>" in out
    assert "/>" in out
    assert "\n    " not in out


def test_without_collapse_markup_is_untouched():
    html = "<html>\n  <body>\n    <!-- note -->\n    <p>Hello</p>\n  </body>\n</html>\n"
    assert minify_html(html, collapse=False) == html


def test_inline_blocks_are_minified_in_both_modes():
    html = "<style>\n  p {\n    margin: 0;\n  }\n</style>\n<script>\n  // greet\n  var x = 1;\n</script>\n"
    for collapse in (True, False):
        out = minify_html(html, collapse=collapse)
        assert "p{margin:0" in out
        assert "greet" not in out
        assert "var x=1" in out


def test_inline_blocks_respect_flags():
    html = "<style>\n  p { margin: 0; }\n</style><script>\n  var x = 1;\n</script>"
    out = minify_html(html, collapse=False, minify_css=False, minify_js=False)
    assert out == html


def test_script_line_breaks_survive_collapse():
    html = "<script>\nvar a = 1\nvar b = 2\n</script>"
    out = minify_html(html, minify_js=False)
    assert "var a = 1\nvar b = 2" in out


def test_template_scripts_are_left_alone():
    html = '<script type="text/template">\n  <p>  {{ name }}  </p>\n</script>'
    out = minify_html(html, collapse=False)
    assert out == html


def test_collapse_keeps_self_closing_slashes():
    out = minify_html('<p>a<br />b<img src="x" /></p>')
    assert out == '<p>a<br/>b<img src="x"/></p>'


def test_collapse_keeps_slash_on_unexpanded_include():
    out = minify_html('<div><include href="nav.html" /></div>')
    assert out == '<div><include href="nav.html"/></div>'


def test_collapse_keeps_space_between_inline_elements():
    out = minify_html("<p><b>a</b>\n<i>b</i></p>")
    assert out == "<p><b>a</b> <i>b</i></p>"


def test_collapse_shrinks_text_whitespace():
    out = minify_html("<p>Nothing   to\n  rewrite.</p><!-- gone --><br />")
    assert out == "<p>Nothing to rewrite.</p><br/>"
