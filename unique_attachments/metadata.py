# metadata.py — link occurrences in prose documents, file nodes in canvases
# Prose: markdown links "[text](target)" and wikilinks "[[target|alias]]",
# either one optionally prefixed with "!" for embeds. Links inside fenced or
# inline code are not occurrences.

import bisect
import json
import re
from dataclasses import dataclass

PROSE_EXT = ".md"
CANVAS_EXT = ".canvas"

MD_LINK = re.compile(r'(!?)\[([^\]\n]*)\]\((?:<([^>\n]+)>|([^)\s]+))([ \t]+"[^"\n]*")?\)')
WIKILINK_ALL = re.compile(r'(!?)\[\[([^\[\]\n]+)\]\]')
SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*:')
FENCE_RE = re.compile(r'^[ \t]*([`~]{3,})')

def is_document(path: str) -> bool:
    return path.endswith(PROSE_EXT) or path.endswith(CANVAS_EXT)

def is_external(link: str) -> bool:
    s = link.strip()
    return not s or s.startswith("#") or bool(SCHEME_RE.match(s))

@dataclass(frozen=True)
class Position:
    line: int
    col: int
    offset: int

@dataclass(frozen=True)
class LinkOccurrence:
    """One located link. `link` is the target as written (subpath included)."""
    kind: str                 # "markdown" | "wikilink"
    link: str
    display_text: str
    embed: bool
    start: Position
    end: Position
    original: str
    angle: bool = False       # markdown target written as <...>
    title: str = ""           # markdown ' "title"' suffix, verbatim
    separator: str = "|"      # wikilink alias separator, \| in table cells

    @property
    def has_default_label(self) -> bool:
        """Empty display text, or display text equal to the link text verbatim."""
        return self.display_text == "" or self.display_text == self.link

    def render(self, link: str, display_text: str) -> str:
        bang = "!" if self.embed else ""
        if self.kind == "wikilink":
            alias = f"{self.separator}{display_text}" if display_text else ""
            return f"{bang}[[{link}{alias}]]"
        target = f"<{link}>" if self.angle else link
        return f"{bang}[{display_text}]({target}{self.title})"

# ================= Code spans =================
def _in_spans(pos: int, spans: list[tuple[int, int]]) -> bool:
    for start, end in spans:
        if start <= pos < end:
            return True
    return False

def collect_code_spans(text: str) -> list[tuple[int, int]]:
    """[start, end) offsets of fenced blocks and inline code."""
    spans = []
    pos = 0
    fence = None
    fence_start = 0
    for line in text.splitlines(keepends=True):
        if fence is None:
            m = FENCE_RE.match(line)
            if m:
                fence = m.group(1)
                fence_start = pos
        elif re.match(rf"^[ \t]*{re.escape(fence[0])}{{{len(fence)},}}\s*$", line):
            spans.append((fence_start, pos + len(line)))
            fence = None
        pos += len(line)
    if fence is not None:
        spans.append((fence_start, len(text)))

    i, n = 0, len(text)
    while i < n:
        if text[i] != "`" or _in_spans(i, spans):
            i += 1
            continue
        run = 1
        while i + run < n and text[i + run] == "`":
            run += 1
        closing = text.find("`" * run, i + run)
        if closing == -1 or _in_spans(closing, spans):
            i += run
            continue
        spans.append((i, closing + run))
        i = closing + run
    spans.sort()
    return spans

# ================= Link parsing =================
def _positions(text: str):
    starts = [0] + [m.end() for m in re.finditer(r"\n", text)]

    def at(offset: int) -> Position:
        line = bisect.bisect_right(starts, offset) - 1
        return Position(line, offset - starts[line], offset)
    return at

def parse_links(text: str) -> list[LinkOccurrence]:
    """All local link occurrences in document order."""
    code = collect_code_spans(text)
    at = _positions(text)
    found = []
    taken = []

    for m in WIKILINK_ALL.finditer(text):
        if _in_spans(m.start(), code):
            continue
        inner = m.group(2)
        link, sep, alias = inner.partition("|")
        if sep and link.endswith("\\"):
            # escaped pipe inside a table cell
            link, sep = link[:-1], "\\|"
        taken.append((m.start(), m.end()))
        if is_external(link):
            continue
        found.append(LinkOccurrence(
            kind="wikilink", link=link, display_text=alias, embed=m.group(1) == "!",
            start=at(m.start()), end=at(m.end()), original=m.group(0),
            separator=sep or "|",
        ))

    for m in MD_LINK.finditer(text):
        if _in_spans(m.start(), code) or _in_spans(m.start(), taken):
            continue
        angle = m.group(3) is not None
        link = m.group(3) if angle else m.group(4)
        if is_external(link):
            continue
        found.append(LinkOccurrence(
            kind="markdown", link=link, display_text=m.group(2), embed=m.group(1) == "!",
            start=at(m.start()), end=at(m.end()), original=m.group(0),
            angle=angle, title=m.group(5) or "",
        ))

    found.sort(key=lambda o: o.start.offset)
    return found

# ================= Canvas =================
def parse_canvas(text: str) -> dict:
    """Canvas JSON as a dict; ValueError when it is not a canvas object."""
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("canvas root is not a JSON object")
    if not isinstance(data.get("nodes", []), list):
        raise ValueError("canvas 'nodes' is not a list")
    return data

def file_nodes(data: dict) -> list[tuple[str, str]]:
    out = []
    for node in data.get("nodes", []):
        if isinstance(node, dict) and node.get("type") == "file" and node.get("file"):
            out.append((node.get("id", ""), node["file"]))
    return out

def dump_canvas(data: dict) -> str:
    return json.dumps(data, indent="\t", ensure_ascii=False)
