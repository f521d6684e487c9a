from pathlib import Path

import pytest

from producify.assets import AssetProcessor, BundleStore, DeletionSet
from producify.document import MAX_INCLUDE_DEPTH, DocumentTransformer
from producify.errors import IncludeCycleDetected, IncludeNotFound
from producify.minify import minify_css
from producify.options import BuildOptions, BuildRequest
from producify.patterns import INCLUDE

from .conftest import write_tree


def make_transformer(tmp_path: Path, files: dict, origin_files=None, **options):
    origin = write_tree(tmp_path / "src", origin_files or {})
    target = write_tree(tmp_path / "out", files)
    request = BuildRequest(origin, target, BuildOptions(**options))
    deletions = DeletionSet()
    processor = AssetProcessor(request, BundleStore(), deletions)
    return DocumentTransformer(request, processor, deletions), request.target


def test_include_is_spliced_and_scheduled(tmp_path):
    transformer, target = make_transformer(
        tmp_path,
        {
            "index.html": '<body><include href="parts/header.html" /><p>x</p></body>',
            "parts/header.html": "<header>Top</header>",
        },
        minify_html=False,
    )

    html = transformer.transform(target / "index.html")

    assert html == "<body><header>Top</header><p>x</p></body>"
    assert (target / "index.html").read_text(encoding="utf-8") == html
    assert (target / "parts" / "header.html").resolve() in transformer.deletions
    assert INCLUDE.search(html) is None


def test_nested_includes_resolve_against_the_document(tmp_path):
    transformer, target = make_transformer(
        tmp_path,
        {
            "index.html": '<include href="a.html"/>',
            "a.html": '<div><include href="b.html"/></div>',
            "b.html": "<span>b</span>",
        },
        minify_html=False,
    )
    assert transformer.transform(target / "index.html") == "<div><span>b</span></div>"


def test_same_include_twice_is_not_a_cycle(tmp_path):
    transformer, target = make_transformer(
        tmp_path,
        {"index.html": '<include href="hr.html"/><include href="hr.html"/>', "hr.html": "<hr/>"},
        minify_html=False,
    )
    assert transformer.transform(target / "index.html") == "<hr/><hr/>"


def test_include_falls_back_to_source_tree(tmp_path):
    transformer, target = make_transformer(
        tmp_path,
        {"blog/post.html": '<include href="shared/footer.html"/>'},
        origin_files={"shared/footer.html": "<footer>f</footer>"},
        minify_html=False,
    )

    html = transformer.transform(target / "blog" / "post.html")

    assert html == "<footer>f</footer>"
    assert target / "shared" / "footer.html" in transformer.deletions


def test_missing_include(tmp_path):
    transformer, target = make_transformer(tmp_path, {"index.html": '<include href="nope.html"/>'})
    with pytest.raises(IncludeNotFound) as excinfo:
        transformer.transform(target / "index.html")
    assert excinfo.value.path == "nope.html"
    assert excinfo.value.referenced_by == target / "index.html"


def test_include_cycle_is_detected(tmp_path):
    transformer, target = make_transformer(
        tmp_path,
        {
            "index.html": '<include href="a.html"/>',
            "a.html": '<include href="b.html"/>',
            "b.html": '<include href="a.html"/>',
        },
    )
    with pytest.raises(IncludeCycleDetected) as excinfo:
        transformer.transform(target / "index.html")
    assert excinfo.value.path.name == "a.html"


def test_document_including_itself(tmp_path):
    transformer, target = make_transformer(tmp_path, {"index.html": '<include href="index.html"/>'})
    with pytest.raises(IncludeCycleDetected):
        transformer.transform(target / "index.html")


def test_include_depth_is_bounded(tmp_path):
    files = {"index.html": '<include href="p0.html"/>'}
    for i in range(MAX_INCLUDE_DEPTH + 2):
        files[f"p{i}.html"] = f'<include href="p{i + 1}.html"/>'
    files[f"p{MAX_INCLUDE_DEPTH + 2}.html"] = "end"
    transformer, target = make_transformer(tmp_path, files)
    with pytest.raises(IncludeCycleDetected):
        transformer.transform(target / "index.html")


def test_includes_disabled_leaves_tags(tmp_path):
    transformer, target = make_transformer(
        tmp_path,
        {"index.html": '<include href="nope.html"/>'},
        parse_includes=False,
        minify_html=False,
    )
    assert transformer.transform(target / "index.html") == '<include href="nope.html"/>'


def test_assets_from_included_markup_are_processed(tmp_path):
    transformer, target = make_transformer(
        tmp_path,
        {
            "index.html": '<head><include href="head.html"/></head>',
            "head.html": '<link rel="stylesheet" href="site.css">',
            "site.css": "a { color: red; }",
        },
        minify_html=False,
    )

    html = transformer.transform(target / "index.html")

    assert html == '<head><link rel="stylesheet" href="site.min.css"></head>'
    assert (target / "site.min.css").read_text(encoding="utf-8") == minify_css("a { color: red; }")


def test_css_and_js_flags(tmp_path):
    page = '<link rel="stylesheet" href="a.css"><script src="a.js"></script>'
    transformer, target = make_transformer(
        tmp_path,
        {"index.html": page, "a.css": "a{}", "a.js": "var a;"},
        minify_html=False,
        minify_css=False,
        minify_js=False,
    )
    assert transformer.transform(target / "index.html") == page
    assert len(transformer.deletions) == 0


def test_bundled_script_tag_disappears(tmp_path):
    transformer, target = make_transformer(
        tmp_path,
        {
            "index.html": '<script src="a.js"></script>\n<script src="b.js"></script>\n<p></p>',
            "a.js": "var a = 1;",
            "b.js": "var b = 2;",
        },
        minify_html=False,
        concat_js=True,
    )
    html = transformer.transform(target / "index.html")
    assert html == '<script src="/bundle.min.js"></script>\n\n<p></p>'
