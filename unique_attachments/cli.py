# cli.py — unique-attachments command line
# Without --active every attachment in the vault is a candidate; with
# --active only the attachments linked from that document are.

import argparse
from pathlib import Path

from .config import Settings, load_config
from .engine import RenameEngine, renamed_message
from .metadata import is_document
from .reporting import Reporter
from .vault import FileSystemVault

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="unique-attachments",
        description="Rename vault attachments to the hash of their content and keep links valid.",
    )
    ap.add_argument("--config", help="Path to YAML/JSON config (default: unique-attachments.yaml|yml|json if present)")
    ap.add_argument("--vault", help="Override config.vault")
    ap.add_argument("--active", metavar="DOCUMENT",
                    help="Only rename attachments linked from this vault-relative .md or .canvas document")
    ap.add_argument("--dry-run", action="store_true", help="Force dry run (overrides config)")
    ap.add_argument("--debug", action="store_true", help="Force debug (overrides config)")
    return ap

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    cfg = load_config(Path(args.config) if args.config else None)

    if args.vault:   cfg["vault"]   = args.vault
    if args.dry_run: cfg["dry_run"] = True
    if args.debug:   cfg["debug"]   = True

    vault_root = Path(cfg["vault"]).resolve()
    if not vault_root.is_dir():
        raise SystemExit(f"Vault folder not found: {vault_root}")

    reporter = Reporter(debug=cfg["debug"])
    vault = FileSystemVault(vault_root)
    engine = RenameEngine(vault, Settings.from_config(cfg), reporter=reporter)

    reporter.debug(f"vault_root = {vault_root}")
    if args.active:
        active = args.active.replace("\\", "/").lstrip("/")
        if not vault.exists(active):
            reporter.notify("No active file")
            return 1
        if not is_document(active):
            reporter.notify("Active file must be a markdown or canvas file")
            return 1
        count = engine.rename_for_document(active)
    else:
        reporter.debug(f"files in vault: {len(vault.list_all_files())}")
        count = engine.rename_all(progress=True)

    message = renamed_message(count)
    reporter.notify(("[dry] " if cfg["dry_run"] else "") + message)
    return 0
