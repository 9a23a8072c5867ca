"""Content-addressed attachment renaming for Obsidian-style vaults."""

from .config import Settings, load_config
from .engine import Decision, RenameEngine
from .hashing import fingerprint
from .reporting import Reporter
from .vault import FileSystemVault, LinkResolver

__version__ = "1.0.0"

__all__ = [
    "Decision",
    "FileSystemVault",
    "LinkResolver",
    "RenameEngine",
    "Reporter",
    "Settings",
    "fingerprint",
    "load_config",
]
