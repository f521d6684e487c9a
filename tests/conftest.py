from pathlib import Path

import pytest

from producify.options import BuildOptions, BuildRequest


def write_tree(root: Path, files: dict) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def read_tree(root: Path) -> dict:
    return {
        p.relative_to(root).as_posix(): p.read_text(encoding="utf-8")
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def site(tmp_path: Path):
    """Return a factory building a source tree and a request for it"""

    def make(files: dict, **options) -> BuildRequest:
        origin = write_tree(tmp_path / "src", files)
        options.setdefault("overwrite", True)
        return BuildRequest(origin, tmp_path / "out", BuildOptions(**options))

    return make
