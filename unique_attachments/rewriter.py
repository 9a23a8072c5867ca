# rewriter.py — point references at a renamed attachment
# Matching is by resolved path, never by literal text, so every spelling of
# the old attachment inside a document is rewritten. Running a rewrite a
# second time finds nothing: the links now resolve to the new path.

from urllib.parse import quote

from .metadata import dump_canvas, parse_canvas, parse_links
from .paths import basename
from .vault import split_subpath

def relink(link: str, document_path: str, new_path: str, resolver) -> str:
    """Link text for `new_path`, keeping the author's folder spelling and subpath.

    Only the last path component changes. When that spelling would not
    resolve to `new_path` the vault path is used instead.
    """
    target, sub = split_subpath(link)
    head, sep, _ = target.rpartition("/")
    candidate = f"{head}{sep}{basename(new_path)}"
    if resolver.resolve(candidate, document_path) != new_path:
        for alt in (new_path, "/" + new_path):
            if resolver.resolve(alt, document_path) == new_path:
                candidate = alt
                break
    return candidate + sub

def rewrite_prose_reference(text: str, document_path: str, old_path: str, new_path: str,
                            resolver) -> tuple[str, int]:
    """Rewrite every link in `text` resolving to `old_path`. Returns (text, count)."""
    edits = []
    for occ in parse_links(text):
        if resolver.resolve(occ.link, document_path, extra=(old_path,)) != old_path:
            continue
        link = relink(occ.link, document_path, new_path, resolver)
        if occ.kind == "markdown" and not occ.angle and " " in link:
            link = quote(link, safe="/#=&?")
        display = occ.display_text
        if display and occ.has_default_label:
            display = link
        edits.append((occ.start.offset, occ.end.offset, occ.render(link, display)))

    # back to front so earlier offsets stay valid
    for start, end, replacement in reversed(edits):
        text = text[:start] + replacement + text[end:]
    return text, len(edits)

def rewrite_canvas_reference(text: str, document_path: str, old_path: str, new_path: str,
                             resolver) -> tuple[str, int]:
    """Point file nodes resolving to `old_path` at `new_path`.

    Node order and every other field are kept; unchanged canvases are
    returned verbatim. Raises ValueError on malformed canvas JSON.
    """
    data = parse_canvas(text)
    count = 0
    for node in data.get("nodes", []):
        if not isinstance(node, dict) or node.get("type") != "file" or not node.get("file"):
            continue
        if resolver.resolve(node["file"], document_path, extra=(old_path,)) == old_path:
            node["file"] = new_path
            count += 1
    if not count:
        return text, 0
    return dump_canvas(data), count
