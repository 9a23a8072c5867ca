# config.py — config-first settings for unique-attachments
# - Config keys: vault, ignore_folders, rename_file_types,
#                rename_only_linked_attachments, merge_the_same_attachments,
#                dry_run, debug
# - YAML (.yaml/.yml) or JSON (.json), deep-merged over CFG_DEFAULTS

import json
from dataclasses import dataclass
from pathlib import Path

import yaml
from tqdm import tqdm

CONFIG_NAMES = ("unique-attachments.yaml", "unique-attachments.yml", "unique-attachments.json")

CFG_DEFAULTS = {
    "vault": ".",

    # Path prefixes (vault-relative) never touched
    "ignore_folders": [".git/", ".obsidian/", ".trash/"],

    # Extensions without the dot; matched case-sensitively against the path end
    "rename_file_types": [
        "png", "jpg", "jpeg", "gif", "bmp", "svg", "webp", "avif",
        "pdf", "mp3", "wav", "m4a", "ogg", "flac", "mp4", "webm", "mov", "mkv",
    ],

    # Policies
    "rename_only_linked_attachments": True,
    "merge_the_same_attachments": True,

    # Execution controls
    "dry_run": False,
    "debug": False,
}

_LIST_KEYS = ("ignore_folders", "rename_file_types")
_BOOL_KEYS = ("rename_only_linked_attachments", "merge_the_same_attachments", "dry_run", "debug")

def _deep_merge(base: dict, override: dict) -> dict:
    out = dict(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def _validate(cfg: dict) -> dict:
    for key in _LIST_KEYS:
        if not isinstance(cfg.get(key), list):
            raise ValueError(f"config.{key} must be a list")
        cfg[key] = [str(x) for x in cfg[key]]
    for key in _BOOL_KEYS:
        if not isinstance(cfg.get(key), bool):
            raise ValueError(f"config.{key} must be true or false")
    if not isinstance(cfg.get("vault"), str):
        raise ValueError("config.vault must be a path string")
    cfg["rename_file_types"] = [e.lstrip(".") for e in cfg["rename_file_types"]]
    return cfg

def load_config(config_path: Path | None = None) -> dict:
    if config_path is None:
        for cand in CONFIG_NAMES:
            if Path(cand).exists():
                config_path = Path(cand)
                break

    if config_path is None:
        tqdm.write("[cfg] No config file found; using built-in defaults")
        return _validate(_deep_merge(CFG_DEFAULTS, {}))

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    text = config_path.read_text(encoding="utf-8")
    try:
        if config_path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text) or {}
    except (yaml.YAMLError, ValueError) as e:
        raise RuntimeError(f"Failed to parse config {config_path}: {e}")
    if not isinstance(data, dict):
        raise RuntimeError(f"Failed to parse config {config_path}: top level must be a mapping")

    return _validate(_deep_merge(CFG_DEFAULTS, data))

@dataclass(frozen=True)
class Settings:
    """Read-only policy handed to the engine."""
    ignore_folders: tuple[str, ...] = tuple(CFG_DEFAULTS["ignore_folders"])
    rename_file_types: tuple[str, ...] = tuple(CFG_DEFAULTS["rename_file_types"])
    rename_only_linked_attachments: bool = True
    merge_the_same_attachments: bool = True
    dry_run: bool = False

    @classmethod
    def from_config(cls, cfg: dict) -> "Settings":
        return cls(
            ignore_folders=tuple(cfg["ignore_folders"]),
            rename_file_types=tuple(cfg["rename_file_types"]),
            rename_only_linked_attachments=cfg["rename_only_linked_attachments"],
            merge_the_same_attachments=cfg["merge_the_same_attachments"],
            dry_run=cfg["dry_run"],
        )

    def is_ignored(self, path: str) -> bool:
        return any(path.startswith(folder) for folder in self.ignore_folders)

    def is_allowed_type(self, path: str) -> bool:
        return any(path.endswith("." + ext) for ext in self.rename_file_types)
