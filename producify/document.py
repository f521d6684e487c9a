"""
Rewrite one copied HTML document in place.

Order matters: includes are expanded first so that stylesheet and script
references brought in by an include get processed like any other; then
stylesheets, then scripts; finally the markup is minified.
"""

from pathlib import Path

from .assets import is_within, read_text, write_text
from .errors import IncludeCycleDetected, IncludeNotFound
from .log import log
from .minify import minify_html
from .options import AssetKind
from .patterns import ASSET_PATTERNS, INCLUDE, splice

MAX_INCLUDE_DEPTH = 32


class DocumentTransformer:
    def __init__(self, request, processor, deletions):
        self.request = request
        self.options = request.options
        self.processor = processor
        self.deletions = deletions

    def transform(self, path):
        path = Path(path)
        html = read_text(path)

        if self.options.parse_includes:
            html = self.expand_includes(html, path)

        for kind in (AssetKind.CSS, AssetKind.JS):
            if self.options.minify_enabled(kind):
                html = self.rewrite_assets(kind, html, path)

        log(f"Saving {path}")
        html = minify_html(
            html,
            collapse=self.options.minify_html,
            minify_css=self.options.minify_css,
            minify_js=self.options.minify_js,
        )
        write_text(path, html)
        return html

    def resolve_include(self, ref, document):
        """Document-relative first, then relative to the source tree root"""
        candidates = [Path(document).parent / ref]
        candidates.append(self.request.origin / ref.lstrip('/'))
        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
        raise IncludeNotFound(ref, document)

    def expand_includes(self, html, document, chain=()):
        """Replace every include tag with the (expanded) included file.

        ``chain`` holds the include files currently being expanded, so a file
        that ends up including itself is reported instead of looping forever.
        """
        if len(chain) > MAX_INCLUDE_DEPTH:
            raise IncludeCycleDetected(chain[-1], chain[:-1])

        match = INCLUDE.search(html)
        while match is not None:
            included = self.resolve_include(match.ref, document)
            if included in chain or included == Path(document).resolve():
                raise IncludeCycleDetected(included, (Path(document), *chain))

            log(f"Including {included} into {document}")
            content = self.expand_includes(read_text(included), document, (*chain, included))
            html = splice(html, match, content)
            self._schedule_include(included)
            match = INCLUDE.search(html)
        return html

    def _schedule_include(self, included):
        origin, target = self.request.origin, self.request.target
        if is_within(included, target):
            self.deletions.schedule(included)
        elif is_within(included, origin):
            self.deletions.schedule(target / included.relative_to(origin))

    def rewrite_assets(self, kind, html, document):
        pattern = ASSET_PATTERNS[kind]
        match = pattern.search(html)
        while match is not None:
            html = splice(html, match, self.processor.process(kind, match, document))
            match = pattern.search(html)
        return html
