"""
Build a site: copy the source tree, rewrite every HTML document, write the
bundles and remove the files that were folded into other files.

Usage:
    builder = SiteBuilder(BuildRequest('public_html', 'www'))
    builder.build()
"""

import shutil
from pathlib import Path

from .assets import AssetProcessor, BundleStore, DeletionSet, write_bundles
from .document import DocumentTransformer
from .errors import BuildError, FolderNotFound, IOFailure, OptionError, OverwriteDeclined
from .log import Colors, error, log
from .options import BuildOptions, BuildRequest, ExitState

HTML_SUFFIXES = ('.html', '.htm')

# OS clutter that does not keep a directory alive
NOISE_FILES = {'thumbs.db', '.ds_store', 'desktop.ini'}


def is_noise(name):
    return name.lower() in NOISE_FILES


def is_effectively_empty(directory):
    return not any(
        p.is_file() and not is_noise(p.name) for p in Path(directory).rglob('*')
    )


def sweep(deletions, root):
    """Delete scheduled files and the directories they leave empty.

    The output root itself is never removed. Files or directories that are
    already gone are skipped.
    """
    root = Path(root)
    removed = []
    for path in deletions:
        log(f"Deleting previously processed file {path}")
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise IOFailure('delete', path, e) from e
        removed.append(path)

        parent = path.parent
        if parent == root or not parent.is_dir():
            continue
        try:
            if is_effectively_empty(parent):
                shutil.rmtree(parent)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise IOFailure('remove directory', parent, e) from e
    return removed


class SiteBuilder:
    def __init__(self, request, confirm=None):
        self.request = request
        self.origin = request.origin
        self.target = request.target
        self.options = request.options
        # Asked before an existing target is wiped; None means "no"
        self.confirm = confirm
        self.reset()

    def reset(self):
        """Start from empty accumulators; every build processes the whole tree"""
        self.bundles = BundleStore()
        self.deletions = DeletionSet()
        self.processor = AssetProcessor(self.request, self.bundles, self.deletions)
        self.transformer = DocumentTransformer(self.request, self.processor, self.deletions)

    def prepare_target(self):
        if not self.origin.is_dir():
            raise FolderNotFound(self.origin)
        # Wiping the target would take the source with it
        if self.origin == self.target or self.origin.is_relative_to(self.target):
            raise OptionError(
                f"Build folder {self.target} must not be the source folder or contain it"
            )
        if self.target.exists():
            if not self.options.overwrite and not (self.confirm and self.confirm(self.target)):
                raise OverwriteDeclined(self.target)
            try:
                if self.target.is_dir():
                    shutil.rmtree(self.target)
                else:
                    self.target.unlink()
            except OSError as e:
                raise IOFailure('remove', self.target, e) from e
        try:
            self.target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure('create', self.target, e) from e

    def _ignore_target(self, directory, names):
        # The output folder may live inside the source folder
        return [n for n in names if (Path(directory) / n).resolve() == self.target]

    def copy_tree(self):
        log(f"Copying {self.origin} to {self.target}")
        try:
            shutil.copytree(self.origin, self.target, ignore=self._ignore_target,
                            dirs_exist_ok=True)
        except (OSError, shutil.Error) as e:
            raise IOFailure('copy', self.origin, e if isinstance(e, OSError) else None) from e

    def discover_documents(self):
        return sorted(
            p for p in self.target.rglob('*')
            if p.is_file() and p.name.lower().endswith(HTML_SUFFIXES)
        )

    def transform_all(self, documents):
        for document in documents:
            # Removed behind our back
            if not document.exists():
                continue
            self.transformer.transform(document)

    def build(self):
        """Run every phase; the first error aborts the build"""
        log(f"Building {self.origin} to {self.target}", Colors.CYAN)
        self.reset()
        self.prepare_target()
        self.copy_tree()
        documents = self.discover_documents()
        self.transform_all(documents)
        write_bundles(self.bundles, self.options)
        sweep(self.deletions, self.target)
        log("Building complete!", Colors.GREEN)
        return documents

    def run(self):
        """Build and report the outcome instead of raising"""
        try:
            self.build()
        except OverwriteDeclined as e:
            error(e)
            return ExitState.DECLINED
        except BuildError as e:
            error(e)
            return ExitState.FAILED
        return ExitState.SUCCESS


def build(origin, target, options=None, confirm=None):
    request = BuildRequest(origin, target, options or BuildOptions())
    return SiteBuilder(request, confirm=confirm).build()
