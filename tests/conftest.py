import pytest

from unique_attachments.config import Settings
from unique_attachments.engine import RenameEngine
from unique_attachments.reporting import Reporter
from unique_attachments.vault import FileSystemVault

@pytest.fixture
def make_vault(tmp_path):
    """Build a vault from {vault path: str | bytes} and return its FileSystemVault."""
    def _make(files: dict) -> FileSystemVault:
        root = tmp_path / "vault"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            p = root / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                p.write_bytes(content)
            else:
                p.write_text(content, encoding="utf-8")
        return FileSystemVault(root)
    return _make

@pytest.fixture
def reporter():
    return Reporter(quiet=True)

@pytest.fixture
def make_engine(reporter):
    def _make(vault, **settings) -> RenameEngine:
        return RenameEngine(vault, Settings(**settings), reporter=reporter)
    return _make
