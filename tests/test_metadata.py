import pytest

from unique_attachments.metadata import (collect_code_spans, file_nodes, is_external,
                                         parse_canvas, parse_links)

def test_markdown_links_and_embeds():
    occs = parse_links("See ![](img.png) and [doc](sub/a.pdf#page=2).")
    assert [o.link for o in occs] == ["img.png", "sub/a.pdf#page=2"]
    assert occs[0].embed and occs[0].kind == "markdown" and occs[0].display_text == ""
    assert not occs[1].embed and occs[1].display_text == "doc"

def test_spans_are_line_and_column():
    text = "line one\n  ![x](a.png) tail"
    occ, = parse_links(text)
    assert (occ.start.line, occ.start.col) == (1, 2)
    assert (occ.end.line, occ.end.col) == (1, 2 + len("![x](a.png)"))
    assert text[occ.start.offset:occ.end.offset] == occ.original == "![x](a.png)"

def test_wikilinks_with_alias_and_subpath():
    occs = parse_links("![[img.png|200]] then [[Some note#Heading]]")
    assert [(o.kind, o.link, o.display_text) for o in occs] == [
        ("wikilink", "img.png", "200"),
        ("wikilink", "Some note#Heading", ""),
    ]
    assert occs[0].embed and not occs[1].embed

def test_links_inside_code_are_ignored():
    text = "`![](a.png)`\n```\n![](b.png)\n[[c.png]]\n```\n![](d.png)\n"
    assert [o.link for o in parse_links(text)] == ["d.png"]

def test_code_spans_cover_fence_and_inline():
    text = "x `y` z\n```\ncode\n```\n"
    spans = collect_code_spans(text)
    assert (2, 5) in spans
    assert any(start == 8 and end == len(text) for start, end in spans)

def test_external_links_are_not_occurrences():
    text = "[x](https://e.com/a.png) [y](mailto:a@b.c) [z](#heading) ![[https://e.com/b.png]]"
    assert parse_links(text) == []
    assert is_external("data:image/png;base64,AAAA")
    assert not is_external("att/img.png")

def test_angle_bracket_target_and_title_round_trip():
    occ, = parse_links('![alt](<my img.png> "Title")')
    assert occ.link == "my img.png" and occ.angle and occ.title == ' "Title"'
    assert occ.render("abc.png", "alt") == '![alt](<abc.png> "Title")'

def test_default_label():
    plain, same, custom = parse_links("![](a.png) [a.png](a.png) [Photo](a.png)")
    assert plain.has_default_label
    assert same.has_default_label
    assert not custom.has_default_label

def test_wikilink_render_keeps_alias():
    occ, = parse_links("![[img.png|300]]")
    assert occ.render("abc.png", occ.display_text) == "![[abc.png|300]]"

def test_wikilink_with_escaped_pipe_in_table_cell():
    occ, = parse_links(r"| ![[img.png\|300]] | caption |")
    assert occ.link == "img.png"
    assert occ.display_text == "300"
    assert occ.separator == r"\|"
    assert occ.render("abc.png", occ.display_text) == r"![[abc.png\|300]]"

def test_canvas_file_nodes():
    data = parse_canvas('{"nodes": [{"id": "1", "type": "file", "file": "a.png"},'
                        ' {"id": "2", "type": "text", "text": "hi"},'
                        ' {"id": "3", "type": "file", "file": "docs/b.pdf", "subpath": "#page=1"}]}')
    assert file_nodes(data) == [("1", "a.png"), ("3", "docs/b.pdf")]

def test_canvas_without_nodes_is_empty():
    assert file_nodes(parse_canvas("{}")) == []

@pytest.mark.parametrize("text", ["{bad json", "[]", '{"nodes": {}}'])
def test_malformed_canvas_raises_value_error(text):
    with pytest.raises(ValueError):
        parse_canvas(text)
