import tarfile

import pytest


@pytest.fixture
def source_tree(tmp_path):
    """Source directory holding a.txt and b/c.txt"""
    source = tmp_path / "source"
    (source / "b").mkdir(parents=True)
    (source / "a.txt").write_text("hello")
    (source / "b" / "c.txt").write_text("world")
    return source


@pytest.fixture
def destination(tmp_path):
    return tmp_path / "backups"


@pytest.fixture
def extract():
    """Extract an archive and return the extraction directory"""

    def _extract(archive, target):
        target.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive, "r:gz") as tar:
            tar.extractall(target, filter="data")
        return target

    return _extract


def relative_entries(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))
