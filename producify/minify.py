"""
Minifiers for linked assets and for the final HTML markup.
"""

import re

import htmlmin
import rcssmin
import rjsmin

from .options import AssetKind

INLINE_BLOCK_RE = re.compile(
    r'(<(style|script)\b([^>]*)>)(.*?)(</\2\s*>)',
    re.DOTALL | re.IGNORECASE,
)
TYPE_ATTR_RE = re.compile(r'''\btype\s*=\s*["']?([^"'\s>]+)''', re.IGNORECASE)

JS_TYPES = {
    'text/javascript', 'application/javascript', 'module',
    'text/ecmascript', 'application/ecmascript',
}

PLACEHOLDER = 'producify-inline-block-{}-'

# htmlmin drops the slash of self-closing tags; carry it through as an attribute
SLASH_MARKER = 'data-producify-self-closing'
SELF_CLOSING_RE = re.compile(r'<([a-zA-Z][\w:-]*)(\s[^<>]*?)?\s*/>')
SLASH_MARKER_RE = re.compile(r'\s+' + SLASH_MARKER + r'''(?:=(?:""|''))?(?=>)''')


def minify_css(css):
    return rcssmin.cssmin(css)


def minify_js(js):
    return rjsmin.jsmin(js)


MINIFIERS = {
    AssetKind.CSS: minify_css,
    AssetKind.JS: minify_js,
}


def minify_asset(kind, source):
    return MINIFIERS[kind](source)


def _inline_kind(tag, attrs):
    if tag == 'style':
        return AssetKind.CSS
    type_match = TYPE_ATTR_RE.search(attrs)
    if type_match is None or type_match.group(1).lower() in JS_TYPES:
        return AssetKind.JS
    # Templates, JSON data blocks and the like are left alone
    return None


def minify_html(html, collapse=True, minify_css=True, minify_js=True):
    """Minify a document.

    With ``collapse`` comments are removed and whitespace runs collapsed to
    one space (self-closing slashes are kept); otherwise the markup is left
    as-is.
    Inline ``<style>`` / ``<script>`` bodies are minified according to
    ``minify_css`` / ``minify_js`` in both modes.
    """
    blocks = []

    def protect(m):
        open_tag, tag, attrs, body, close_tag = m.groups()
        kind = _inline_kind(tag.lower(), attrs)
        if body.strip() and (
            (kind is AssetKind.CSS and minify_css) or (kind is AssetKind.JS and minify_js)
        ):
            body = minify_asset(kind, body)
        if not collapse:
            return open_tag + body + close_tag
        blocks.append(body)
        return open_tag + PLACEHOLDER.format(len(blocks) - 1) + close_tag

    html = INLINE_BLOCK_RE.sub(protect, html)
    if not collapse:
        return html

    html = SELF_CLOSING_RE.sub(
        lambda m: f"<{m.group(1)}{m.group(2) or ''} {SLASH_MARKER}>", html
    )
    html = htmlmin.minify(
        html,
        remove_comments=True,
        reduce_boolean_attributes=False,
        remove_optional_attribute_quotes=False,
        keep_pre=False,
    )
    html = SLASH_MARKER_RE.sub('/', html)
    for index, body in enumerate(blocks):
        html = html.replace(PLACEHOLDER.format(index), body, 1)
    return html
