# paths.py — pure string helpers for vault paths
# Vault paths are POSIX, case-sensitive and relative to the vault root
# (no leading slash), e.g. "attachments/img.png".

from pathlib import PurePosixPath

def extension(path: str) -> str:
    """Extension including the dot ("" when there is none). Dotfiles have no extension."""
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot <= 0:
        return ""
    return name[dot:]

def basename(path: str, ext: str = "") -> str:
    name = path.rsplit("/", 1)[-1]
    if ext and name.endswith(ext) and name != ext:
        return name[:-len(ext)]
    return name

def dirname(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else ""

def join(folder: str, name: str) -> str:
    return f"{folder}/{name}" if folder else name

def with_base_name(path: str, new_base: str) -> str:
    """Replace the stem of the last component, keeping folder and extension."""
    ext = extension(path)
    return join(dirname(path), new_base + ext)

def collapse(path: str) -> str:
    """Normalize '.', '..' and repeated slashes; '..' never climbs above the root."""
    stack = []
    for part in PurePosixPath(path).parts:
        if part in ("", ".", "/"):
            continue
        if part == "..":
            if stack:
                stack.pop()
            continue
        stack.append(part)
    return "/".join(stack)

def resolve_relative(link_target: str, document_path: str) -> str:
    """Resolve a link target against the containing document's folder.

    A leading '/' makes the target vault-root absolute.
    """
    target = link_target.replace("\\", "/")
    if target.startswith("/"):
        return collapse(target)
    return collapse(join(dirname(document_path), target))
