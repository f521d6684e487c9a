"""
Linked CSS/JS processing: minify each referenced file and either write it
next to the original or fold it into a per-directory bundle.

``BundleStore`` and ``DeletionSet`` accumulate state across all documents of
one build. They are created by the builder and handed to every phase.
"""

import threading
from pathlib import Path, PurePosixPath

from .errors import AssetNotFound, IOFailure
from .log import Colors, log
from .minify import minify_asset


def read_text(path):
    try:
        return Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise IOFailure('read', path, e) from e


def write_text(path, content):
    try:
        Path(path).write_text(content, encoding='utf-8')
    except OSError as e:
        raise IOFailure('write', path, e) from e


def minified_name(name, kind):
    """``style.css`` -> ``style.min.css``; the part before the last dot is kept"""
    stem = name.rsplit('.', 1)[0] if '.' in name else name
    return stem + kind.minified_suffix


def is_within(path, root):
    try:
        Path(path).relative_to(root)
    except ValueError:
        return False
    return True


class BundleStore:
    """Minified chunks per (kind, bundle directory), in insertion order"""

    def __init__(self):
        self._bundles = {}
        self._sources = {}
        self._lock = threading.Lock()

    def add(self, kind, key, source, content):
        """Append ``content`` to the bundle; return True if the bundle is new.

        A source file already folded into this bundle is not appended twice.
        """
        with self._lock:
            bundle_key = (kind, Path(key))
            is_new = bundle_key not in self._bundles
            chunks = self._bundles.setdefault(bundle_key, [])
            sources = self._sources.setdefault(bundle_key, set())
            if Path(source) not in sources:
                sources.add(Path(source))
                chunks.append(content)
            return is_new

    def content(self, kind, key):
        return '\n'.join(self._bundles[(kind, Path(key))])

    def items(self):
        for (kind, key), chunks in self._bundles.items():
            yield kind, key, '\n'.join(chunks)

    def __contains__(self, item):
        kind, key = item
        return (kind, Path(key)) in self._bundles

    def __len__(self):
        return len(self._bundles)


class DeletionSet:
    """Files to remove once every document has been processed"""

    def __init__(self):
        self._paths = {}
        self._lock = threading.Lock()

    def schedule(self, path):
        with self._lock:
            self._paths.setdefault(Path(path), None)

    def __iter__(self):
        with self._lock:
            return iter(list(self._paths))

    def __contains__(self, path):
        return Path(path) in self._paths

    def __len__(self):
        return len(self._paths)


class AssetProcessor:
    def __init__(self, request, bundles, deletions):
        self.request = request
        self.options = request.options
        self.target = request.target
        self.bundles = bundles
        self.deletions = deletions

    def resolve(self, kind, ref, document):
        """Locate a referenced asset inside the output tree.

        References are relative to the document; a leading ``/`` means the
        output tree root. Nothing else is tried.
        """
        document = Path(document)
        if ref.startswith('/'):
            candidate = self.target / ref.lstrip('/')
        else:
            candidate = document.parent / ref
        candidate = candidate.resolve()
        if not candidate.is_file() or not is_within(candidate, self.target):
            raise AssetNotFound(kind, ref, document)
        return candidate

    def bundle_ref(self, kind, key):
        relative = PurePosixPath(Path(key).relative_to(self.target).as_posix())
        if str(relative) == '.':
            return '/' + self.options.bundle_filename(kind)
        return f"/{relative}/{self.options.bundle_filename(kind)}"

    def process(self, kind, match, document):
        """Return the replacement text for the tag ``match`` found in ``document``"""
        source = self.resolve(kind, match.ref, document)
        minified_path = source.with_name(minified_name(source.name, kind))
        log(f"Minifying {source} to {minified_path}")
        content = minify_asset(kind, read_text(source))
        self.deletions.schedule(source)

        if not self.options.concat_enabled(kind):
            write_text(minified_path, content)
            ref_dir, _, ref_name = match.ref.rpartition('/')
            new_ref = minified_name(ref_name, kind)
            if ref_dir or match.ref.startswith('/'):
                new_ref = f"{ref_dir}/{new_ref}"
            return match.replace_ref(new_ref)

        key = minified_path.parent
        if self.bundles.add(kind, key, source, content):
            return match.replace_ref(self.bundle_ref(kind, key))
        return ''


def write_bundles(bundles, options):
    """Write every accumulated bundle to ``<directory>/<bundle filename>``"""
    written = []
    for kind, key, content in bundles.items():
        path = Path(key) / options.bundle_filename(kind)
        log(f"Writing {kind.label} bundle file {path}", Colors.CYAN)
        write_text(path, content)
        written.append(path)
    return written
