# vault.py — directory-backed storage and link resolution
# Every path crossing this module's API is a vault path (POSIX, relative to
# the vault root). Mutations refuse to touch anything outside the root.

from collections import defaultdict
from pathlib import Path
from urllib.parse import unquote

from .paths import basename, collapse, dirname, extension, resolve_relative

# ================= Safety guard: never modify outside the vault =================
def assert_in_vault(vault_root: Path, target: Path):
    target = Path(target).resolve()
    root = Path(vault_root).resolve()
    try:
        target.relative_to(root)
    except ValueError:
        raise PermissionError(f"Refusing to modify outside vault: {target} (vault={root})")

class FileSystemVault:
    """Storage over a vault directory.

    The file listing (and a name -> paths map over it) is scanned once and
    then kept in step with the renames, deletes and writes made through
    this object. Call refresh() after changing the directory behind its back.
    """

    def __init__(self, root):
        self.root = Path(root).resolve()
        self._files: set[str] | None = None
        self._by_name: dict[str, set[str]] = defaultdict(set)

    def refresh(self):
        self._files = set()
        self._by_name = defaultdict(set)
        for p in self.root.rglob("*"):
            if p.is_file():
                self._add(p.relative_to(self.root).as_posix())

    def _index(self) -> set[str]:
        if self._files is None:
            self.refresh()
        return self._files

    def _add(self, path: str):
        self._files.add(path)
        self._by_name[basename(path)].add(path)

    def _discard(self, path: str):
        self._files.discard(path)
        self._by_name[basename(path)].discard(path)

    def _abs(self, path: str) -> Path:
        return self.root / collapse(path)

    def list_all_files(self) -> list[str]:
        return sorted(self._index())

    def files_named(self, name: str) -> set[str]:
        """Vault paths whose last component is `name`."""
        self._index()
        return set(self._by_name.get(name, ()))

    def exists(self, path: str) -> bool:
        return collapse(path) in self._index()

    def open_bytes(self, path: str):
        return open(self._abs(path), "rb")

    def read_bytes(self, path: str) -> bytes:
        return self._abs(path).read_bytes()

    def read_text(self, path: str) -> str:
        # newline="" keeps CRLF documents byte-identical when written back
        with open(self._abs(path), "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, path: str, content: str):
        dst = self._abs(path)
        assert_in_vault(self.root, dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        with open(dst, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        self._index()
        self._add(collapse(path))

    def rename(self, path: str, new_path: str):
        src, dst = self._abs(path), self._abs(new_path)
        assert_in_vault(self.root, src)
        assert_in_vault(self.root, dst)
        if dst.exists():
            raise FileExistsError(f"Destination already exists: {new_path}")
        dst.parent.mkdir(parents=True, exist_ok=True)
        src.rename(dst)
        self._index()
        self._discard(collapse(path))
        self._add(collapse(new_path))

    def delete(self, path: str):
        target = self._abs(path)
        assert_in_vault(self.root, target)
        target.unlink()
        self._index()
        self._discard(collapse(path))

def split_subpath(link: str) -> tuple[str, str]:
    """'a/b.pdf#page=2' -> ('a/b.pdf', '#page=2')"""
    if "#" in link:
        target, sub = link.split("#", 1)
        return target, "#" + sub
    return link, ""

def link_name(link: str) -> str:
    """Last path component a link asks for, decoded, subpath dropped."""
    target, _ = split_subpath(link)
    return unquote(target).strip().replace("\\", "/").rsplit("/", 1)[-1]

class LinkResolver:
    """Turns link text found in a document into the vault path it points at.

    Order: vault-root for a leading '/', otherwise the containing document's
    folder and then the vault root; targets without an extension also try
    '.md'. Anything still unresolved is looked up by path suffix across the
    whole vault, preferring the document's own folder, then the shortest
    path, then lexical order.
    """

    def __init__(self, storage):
        self.storage = storage

    def resolve(self, link: str, document_path: str, extra=()) -> str | None:
        """Resolve link text; paths in `extra` are treated as existing files."""
        target, _ = split_subpath(link)
        target = unquote(target).strip().replace("\\", "/")
        if not target:
            return None
        extra = set(extra)

        def _exists(p: str) -> bool:
            return p in extra or self.storage.exists(p)

        if target.startswith("/"):
            forms = [collapse(target)]
        else:
            forms = [resolve_relative(target, document_path), collapse(target)]
        candidates = []
        for form in forms:
            candidates.append(form)
            if not extension(form):
                candidates.append(form + ".md")
        for cand in candidates:
            if cand and _exists(cand):
                return cand

        if target.startswith(("/", ".")):
            return None
        wanted = [collapse(target)]
        if not extension(wanted[0]):
            wanted.append(wanted[0] + ".md")
        matches = []
        for w in wanted:
            name = basename(w)
            pool = self.storage.files_named(name) | {p for p in extra if basename(p) == name}
            matches.extend(p for p in pool if p == w or p.endswith("/" + w))
        if not matches:
            return None
        home = dirname(document_path)
        matches.sort(key=lambda p: (dirname(p) != home, len(p), p))
        return matches[0]
