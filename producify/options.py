"""
Build configuration: what to do (BuildOptions) and where (BuildRequest).
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from .errors import OptionError

DEFAULT_CSS_BUNDLE = 'bundle.min.css'
DEFAULT_JS_BUNDLE = 'bundle.min.js'


class AssetKind(Enum):
    CSS = 'css'
    JS = 'js'

    @property
    def extension(self):
        return '.' + self.value

    @property
    def minified_suffix(self):
        return '.min.' + self.value

    @property
    def label(self):
        return self.value.upper()


class ExitState(Enum):
    SUCCESS = 0
    FAILED = 1
    DECLINED = 2

    @property
    def exit_code(self):
        return 0 if self is ExitState.SUCCESS else 1


@dataclass(frozen=True)
class BuildOptions:
    minify_html: bool = True
    minify_js: bool = True
    minify_css: bool = True
    concat_js: bool = False
    concat_css: bool = False
    parse_includes: bool = True
    overwrite: bool = False
    css_bundle_filename: str = DEFAULT_CSS_BUNDLE
    js_bundle_filename: str = DEFAULT_JS_BUNDLE

    def __post_init__(self):
        _check_bundle_filename(self.css_bundle_filename, AssetKind.CSS)
        _check_bundle_filename(self.js_bundle_filename, AssetKind.JS)

    def minify_enabled(self, kind):
        return self.minify_css if kind is AssetKind.CSS else self.minify_js

    def concat_enabled(self, kind):
        return self.concat_css if kind is AssetKind.CSS else self.concat_js

    def bundle_filename(self, kind):
        return self.css_bundle_filename if kind is AssetKind.CSS else self.js_bundle_filename


def _check_bundle_filename(name, kind):
    if not name or Path(name).name != name or name in ('.', '..'):
        raise OptionError(f"Invalid {kind.label} bundle filename: {name!r}")
    # Anything else would be matched again by the tag scanner
    if not name.lower().endswith(kind.minified_suffix):
        raise OptionError(
            f"{kind.label} bundle filename must end in {kind.minified_suffix}: {name!r}"
        )


@dataclass(frozen=True)
class BuildRequest:
    origin: Path
    target: Path
    options: BuildOptions = field(default_factory=BuildOptions)

    def __post_init__(self):
        object.__setattr__(self, 'origin', Path(self.origin).resolve())
        object.__setattr__(self, 'target', Path(self.target).resolve())

    def with_options(self, **changes):
        return replace(self, options=replace(self.options, **changes))
