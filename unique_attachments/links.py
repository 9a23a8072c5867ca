# links.py — which documents reference an attachment, and fixing them up
# Every document is parsed and resolved once into a reverse index
# (target -> documents). A document is re-indexed after this index rewrites
# it, or when a file it links to by name appears or disappears
# (files_changed). A document that cannot be read or parsed is reported
# once and then treated as having no links, without affecting any other
# document.

from collections import defaultdict

from .metadata import (CANVAS_EXT, PROSE_EXT, LinkOccurrence, file_nodes, is_document,
                       parse_canvas, parse_links)
from .paths import basename
from .rewriter import rewrite_canvas_reference, rewrite_prose_reference
from .vault import link_name

class LinkIndex:
    def __init__(self, storage, resolver, reporter):
        self.storage = storage
        self.resolver = resolver
        self.reporter = reporter
        self._prose: dict[str, list[LinkOccurrence]] = {}
        self._canvas: dict[str, list[tuple[str, str]]] = {}
        self._broken: set[str] = set()

        # reverse index, built on first query
        self._built = False
        self._targets: dict[str, list[str]] = {}
        self._names: dict[str, set[str]] = {}
        self._referrers: dict[str, set[str]] = defaultdict(set)
        self._by_link_name: dict[str, set[str]] = defaultdict(set)
        self._stale: set[str] = set()

    def forget(self, document_path: str):
        self._prose.pop(document_path, None)
        self._canvas.pop(document_path, None)
        self._broken.discard(document_path)
        if self._built:
            self._stale.add(document_path)

    def files_changed(self, *paths: str):
        """Files appeared or vanished: re-resolve documents linking to them by name."""
        if not self._built:
            return
        for path in paths:
            name = basename(path)
            self._stale |= self._by_link_name.get(name, set())
            if name.endswith(PROSE_EXT):
                self._stale |= self._by_link_name.get(name[:-len(PROSE_EXT)], set())
            if is_document(path):
                self.forget(path)

    def _parse_failed(self, document_path: str, e: Exception):
        if document_path not in self._broken:
            self._broken.add(document_path)
            self.reporter.log_error(f"cant parse {document_path}, its links are skipped.\n{e}")

    # ---- document access ----
    def occurrences(self, document_path: str) -> list[LinkOccurrence]:
        if document_path in self._broken:
            return []
        if document_path not in self._prose:
            try:
                self._prose[document_path] = parse_links(self.storage.read_text(document_path))
            except (UnicodeDecodeError, OSError) as e:
                self._parse_failed(document_path, e)
                return []
        return self._prose[document_path]

    def extract_file_nodes(self, canvas_path: str) -> list[tuple[str, str]]:
        """(node id, file) for every file node of a canvas."""
        if canvas_path in self._broken:
            return []
        if canvas_path not in self._canvas:
            try:
                self._canvas[canvas_path] = file_nodes(parse_canvas(self.storage.read_text(canvas_path)))
            except (ValueError, OSError) as e:
                self._parse_failed(canvas_path, e)
                return []
        return self._canvas[canvas_path]

    def documents(self) -> list[str]:
        return [p for p in self.storage.list_all_files() if is_document(p)]

    # ---- reverse index ----
    def _links(self, document_path: str) -> list[str]:
        if document_path.endswith(CANVAS_EXT):
            return [f for _, f in self.extract_file_nodes(document_path)]
        return [o.link for o in self.occurrences(document_path)]

    def _index_document(self, document_path: str):
        links = self._links(document_path)
        targets = []
        for link in links:
            target = self.resolver.resolve(link, document_path)
            if target is not None:
                targets.append(target)
        targets = list(dict.fromkeys(targets))
        names = {link_name(link) for link in links}
        self._targets[document_path] = targets
        self._names[document_path] = names
        for target in targets:
            self._referrers[target].add(document_path)
        for name in names:
            self._by_link_name[name].add(document_path)

    def _unindex_document(self, document_path: str):
        for target in self._targets.pop(document_path, ()):
            self._referrers[target].discard(document_path)
        for name in self._names.pop(document_path, ()):
            self._by_link_name[name].discard(document_path)

    def _refresh(self):
        if not self._built:
            for doc in self.documents():
                self._index_document(doc)
            self._built = True
            return
        for doc in sorted(self._stale):
            self._unindex_document(doc)
            if is_document(doc) and self.storage.exists(doc):
                self._index_document(doc)
        self._stale.clear()

    # ---- queries ----
    def resolved_links(self, document_path: str) -> list[str]:
        """Distinct vault paths a document links to, in document order."""
        self._refresh()
        if document_path not in self._targets:
            self._index_document(document_path)
        return list(self._targets[document_path])

    def find_referencing_documents(self, attachment_path: str) -> set[str]:
        self._refresh()
        return set(self._referrers.get(attachment_path, ()))

    def extract_occurrences(self, document_path: str, attachment_path: str) -> list[LinkOccurrence]:
        """Occurrences of the attachment whose display text may be relabeled.

        Links carrying custom display text are left out.
        """
        return [o for o in self.occurrences(document_path)
                if o.has_default_label
                and self.resolver.resolve(o.link, document_path) == attachment_path]

    # ---- rewriting ----
    def update_changed_path(self, document_path: str, old_path: str, new_path: str) -> int:
        """Rewrite one document's references from old_path to new_path.

        Returns the number of references changed. Read, parse and write
        failures are reported and give 0.
        """
        try:
            text = self.storage.read_text(document_path)
            if document_path.endswith(CANVAS_EXT):
                updated, count = rewrite_canvas_reference(text, document_path, old_path, new_path, self.resolver)
            elif document_path.endswith(PROSE_EXT):
                updated, count = rewrite_prose_reference(text, document_path, old_path, new_path, self.resolver)
            else:
                return 0
        except (ValueError, OSError) as e:
            # UnicodeDecodeError and json.JSONDecodeError are ValueErrors
            self._parse_failed(document_path, e)
            return 0
        if not count:
            return 0
        try:
            self.storage.write_text(document_path, updated)
        except OSError as e:
            self.reporter.log_error(f"cant update links in {document_path}.\n{e}")
            return 0
        self.forget(document_path)
        self.reporter.debug(f"{document_path}: {count} link(s) {old_path} -> {new_path}")
        return count
