# engine.py — rename attachments to their content hash, merging duplicates
#
# For each candidate attachment:
#   1) skip ignored folders and file types outside the allow-list
#   2) canonical name = MD5 of the content; already named so -> no-op
#   3) collect referencing documents (prose + canvas); none and
#      rename_only_linked_attachments -> no-op
#   4) nothing at the canonical path -> rename, then rewrite references
#   5) canonical path taken by different content -> blocked
#      taken by the same content -> merge (delete + rewrite) if allowed
# Attachments are processed one at a time, each one finished (references
# included) before the next starts, so when two files share a hash the
# first one in iteration order takes the name.

from enum import Enum

from tqdm import tqdm

from .hashing import fingerprint_file
from .links import LinkIndex
from .metadata import is_document
from .paths import basename, extension, with_base_name
from .reporting import Reporter
from .vault import LinkResolver

class Decision(Enum):
    NOOP = "no-op"
    RENAME = "rename"
    MERGE = "merge-and-delete"
    BLOCKED = "blocked"

    @property
    def acted(self) -> bool:
        return self in (Decision.RENAME, Decision.MERGE)

def renamed_message(count: int) -> str:
    if count == 0:
        return "No files found that need to be renamed"
    if count == 1:
        return "Renamed 1 file."
    return f"Renamed {count} files."

def _moving(path: str, valid_path: str) -> str:
    return f"\n   {path}\n    to\n   {valid_path}\n   "

class RenameEngine:
    def __init__(self, storage, settings, reporter=None, resolver=None, index=None):
        self.storage = storage
        self.settings = settings
        self.reporter = reporter or Reporter()
        self.resolver = resolver or LinkResolver(storage)
        self.index = index or LinkIndex(storage, self.resolver, self.reporter)

    def canonical_base_name(self, path: str) -> str:
        with self.storage.open_bytes(path) as f:
            return fingerprint_file(f)

    # ================= Entry points =================
    def rename_all(self, progress: bool = False) -> int:
        """Every file in the vault is a candidate. Returns renamed + merged count."""
        renamed = 0
        files = self.storage.list_all_files()
        for path in tqdm(files, desc="Renaming attachments", unit="file", disable=not progress):
            if self.rename_attachment_if_needed(path).acted:
                renamed += 1
        return renamed

    def rename_for_document(self, document_path: str) -> int:
        """Only attachments linked from one prose or canvas document."""
        if not is_document(document_path):
            raise ValueError(f"not a markdown or canvas document: {document_path}")
        renamed = 0
        for target in self.index.resolved_links(document_path):
            if self.rename_attachment_if_needed(target).acted:
                renamed += 1
        return renamed

    # ================= One attachment =================
    def rename_attachment_if_needed(self, path: str) -> Decision:
        s = self.settings
        if s.is_ignored(path) or not s.is_allowed_type(path):
            return Decision.NOOP
        if not self.storage.exists(path):
            return Decision.NOOP

        try:
            valid_base = self.canonical_base_name(path)
        except OSError as e:
            self.reporter.log_error(f"cant read file {path}.\n{e}")
            return Decision.BLOCKED
        if basename(path, extension(path)) == valid_base:
            return Decision.NOOP

        # fixed work-list, gathered while the old path still exists
        notes = sorted(self.index.find_referencing_documents(path))
        if not notes and s.rename_only_linked_attachments:
            return Decision.NOOP

        valid_path = with_base_name(path, valid_base)
        if self.storage.exists(valid_path):
            return self._merge(path, valid_path, valid_base, notes)
        return self._rename(path, valid_path, notes)

    def _rename(self, path: str, valid_path: str, notes: list[str]) -> Decision:
        if self.settings.dry_run:
            self.reporter.info(f"[dry] file would be renamed [from, to]:\n   {path}\n   {valid_path}")
            return Decision.RENAME
        try:
            self.storage.rename(path, valid_path)
        except OSError as e:
            self.reporter.log_error("cant rename file" + _moving(path, valid_path) + str(e))
            return Decision.BLOCKED

        self.index.files_changed(path, valid_path)
        self._update_references(notes, path, valid_path)
        self.reporter.info(f"file renamed [from, to]:\n   {path}\n   {valid_path}")
        return Decision.RENAME

    def _merge(self, path: str, valid_path: str, valid_base: str, notes: list[str]) -> Decision:
        try:
            other_base = self.canonical_base_name(valid_path)
        except OSError as e:
            self.reporter.log_error(f"cant read file {valid_path}.\n{e}")
            return Decision.BLOCKED
        if other_base != valid_base:
            self.reporter.warn("cant rename file" + _moving(path, valid_path)
                               + "Another file exists with the same (target) name but different content.")
            return Decision.BLOCKED

        if not self.settings.merge_the_same_attachments:
            self.reporter.warn("cant rename file" + _moving(path, valid_path)
                               + "Another file exists with the same (target) name and the same content. "
                               "Enable merge_the_same_attachments to delete this file and merge attachments.")
            return Decision.BLOCKED

        if self.settings.dry_run:
            self.reporter.info(f"[dry] duplicate would be merged [from, into]:\n   {path}\n   {valid_path}")
            return Decision.MERGE
        try:
            self.storage.delete(path)
        except OSError as e:
            self.reporter.log_error(f"cant delete duplicate file {path}.\n{e}")
            return Decision.BLOCKED

        self.index.files_changed(path)
        self._update_references(notes, path, valid_path)
        self.reporter.info(f"file content is the same in \n   {path}\n   and \n   {valid_path}\n   Duplicates merged.")
        return Decision.MERGE

    def _update_references(self, notes: list[str], old_path: str, new_path: str):
        for note in notes:
            self.index.update_changed_path(note, old_path, new_path)
