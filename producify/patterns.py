"""
Locate processable tags inside an HTML document's text.

Documents are never parsed into a tree. Each pattern scans the current
buffer from the start and returns the first eligible tag, so callers splice
in a replacement and scan again until nothing is left:

    match = STYLESHEET.search(html)
    while match:
        html = splice(html, match, rewrite(match))
        match = STYLESHEET.search(html)

A rewritten tag must never be eligible again (minified references end in
``.min.css`` / ``.min.js``), otherwise the loop does not terminate.
"""

import re
from dataclasses import dataclass

from .options import AssetKind

# Comments are consumed first so tags inside them are never touched
TAG_RE = re.compile(r'<!--.*?-->|<([a-zA-Z][\w:-]*)((?:\s[^>]*)?)>', re.DOTALL)

ATTR_RE = re.compile(
    r'''([^\s"'=<>/]+)'''
    r'''(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|((?:[^\s"'=<>`/]|/(?!\s*$))+)))?'''
)

CLOSE_SCRIPT_RE = re.compile(r'\s*</script\s*>', re.IGNORECASE)

URL_SCHEME_RE = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.-]*:')


@dataclass(frozen=True)
class TagMatch:
    """A tag found in a document.

    ``start``/``end`` locate ``text`` inside the scanned buffer;
    ``ref_start``/``ref_end`` locate ``ref`` inside ``text``.
    """
    start: int
    end: int
    text: str
    ref: str
    ref_start: int
    ref_end: int

    def replace_ref(self, new_ref):
        """Return the tag text with only its reference value replaced"""
        return self.text[:self.ref_start] + new_ref + self.text[self.ref_end:]


def splice(text, match, replacement):
    return text[:match.start] + replacement + text[match.end:]


def is_local(ref):
    """True for references that point into the site rather than at a URL"""
    return bool(ref) and not ref.startswith('//') and not URL_SCHEME_RE.match(ref)


def parse_attributes(attrs):
    """Yield (name, value, value_start, value_end) for an attribute string.

    Names are lower-cased; offsets are relative to ``attrs``. Attributes
    without a value yield ``None`` and ``-1`` offsets.
    """
    for m in ATTR_RE.finditer(attrs):
        name = m.group(1).lower()
        for group in (2, 3, 4):
            if m.group(group) is not None:
                yield name, m.group(group), m.start(group), m.end(group)
                break
        else:
            yield name, None, -1, -1


class TagPattern:
    """Find the first tag named ``tag`` whose ``attribute`` passes ``accept``.

    ``accept`` receives the reference value and a dict of all attribute
    values. With ``swallow_close`` an immediately following closing tag is
    made part of the match.
    """

    def __init__(self, tag, attribute, accept, swallow_close=None):
        self.tag = tag
        self.attribute = attribute
        self.accept = accept
        self.swallow_close = swallow_close

    def search(self, text):
        for m in TAG_RE.finditer(text):
            if m.group(1) is None or m.group(1).lower() != self.tag:
                continue
            match = self._match_tag(text, m)
            if match is not None:
                return match
        return None

    def _match_tag(self, text, m):
        attrs = m.group(2)
        values = {}
        ref = None
        for name, value, value_start, value_end in parse_attributes(attrs):
            values.setdefault(name, value)
            if name == self.attribute and ref is None and value is not None:
                ref = (value.strip(), value_start, value_end)
        if ref is None or not self.accept(ref[0], values):
            return None

        end = m.end()
        if self.swallow_close is not None:
            close = self.swallow_close.match(text, end)
            if close:
                end = close.end()

        offset = m.start(2) - m.start()
        value, value_start, value_end = ref
        # Keep surrounding whitespace inside quotes untouched
        raw = attrs[value_start:value_end]
        lead = len(raw) - len(raw.lstrip())
        return TagMatch(
            start=m.start(),
            end=end,
            text=text[m.start():end],
            ref=value,
            ref_start=offset + value_start + lead,
            ref_end=offset + value_start + lead + len(value),
        )


def _accept_include(ref, attrs):
    return bool(ref)


def _accept_stylesheet(ref, attrs):
    rel = (attrs.get('rel') or '').lower().split()
    type_ = (attrs.get('type') or '').strip().lower()
    if 'stylesheet' not in rel and type_ != 'text/css':
        return False
    return is_local(ref) and not ref.lower().endswith(AssetKind.CSS.minified_suffix)


def _accept_script(ref, attrs):
    lowered = ref.lower()
    return (is_local(ref)
            and lowered.endswith(AssetKind.JS.extension)
            and not lowered.endswith(AssetKind.JS.minified_suffix))


INCLUDE = TagPattern('include', 'href', _accept_include)
STYLESHEET = TagPattern('link', 'href', _accept_stylesheet)
SCRIPT = TagPattern('script', 'src', _accept_script, swallow_close=CLOSE_SCRIPT_RE)

ASSET_PATTERNS = {
    AssetKind.CSS: STYLESHEET,
    AssetKind.JS: SCRIPT,
}
