import pytest

from unique_attachments.vault import LinkResolver, link_name, split_subpath

@pytest.fixture
def vault(make_vault):
    return make_vault({
        "notes/n.md": "hello",
        "att/img.png": b"png",
        "att/my img.png": b"spaced",
        "att/doc.pdf": b"pdf",
        "deep/folder/x.png": b"x1",
        "z/x.png": b"x2",
        "notes/local.png": b"local",
        "Other note.md": "other",
    })

def test_listing_and_exists(vault):
    files = vault.list_all_files()
    assert files == sorted(files)
    assert "att/img.png" in files
    assert vault.exists("att/img.png")
    assert vault.exists("att/./img.png")
    assert not vault.exists("att/missing.png")

def test_rename_and_delete_keep_listing_in_step(vault):
    vault.rename("att/img.png", "att/abc.png")
    assert not vault.exists("att/img.png")
    assert vault.exists("att/abc.png")
    assert vault.read_bytes("att/abc.png") == b"png"
    vault.delete("att/abc.png")
    assert not vault.exists("att/abc.png")
    assert not (vault.root / "att" / "abc.png").exists()

def test_rename_onto_existing_file_fails(vault):
    with pytest.raises(FileExistsError):
        vault.rename("att/img.png", "att/doc.pdf")
    assert vault.read_bytes("att/doc.pdf") == b"pdf"

def test_delete_missing_file_fails(vault):
    with pytest.raises(FileNotFoundError):
        vault.delete("att/missing.png")

def test_mutations_outside_vault_are_refused(vault):
    outside = vault.root.parent / "outside"
    outside.mkdir()
    (vault.root / "link").symlink_to(outside, target_is_directory=True)
    with pytest.raises(PermissionError):
        vault.rename("att/img.png", "link/img.png")
    assert vault.exists("att/img.png")

def test_text_round_trip_keeps_crlf(vault):
    vault.write_text("notes/crlf.md", "a\r\nb\r\n")
    assert vault.read_text("notes/crlf.md") == "a\r\nb\r\n"
    assert vault.exists("notes/crlf.md")

def test_split_subpath():
    assert split_subpath("a/b.pdf#page=2") == ("a/b.pdf", "#page=2")
    assert split_subpath("a/b.pdf") == ("a/b.pdf", "")

def test_resolve_relative_then_vault_root(vault):
    r = LinkResolver(vault)
    assert r.resolve("local.png", "notes/n.md") == "notes/local.png"
    assert r.resolve("../att/img.png", "notes/n.md") == "att/img.png"
    assert r.resolve("att/img.png", "notes/n.md") == "att/img.png"
    assert r.resolve("/att/img.png", "notes/n.md") == "att/img.png"

def test_resolve_bare_name_anywhere_in_vault(vault):
    r = LinkResolver(vault)
    assert r.resolve("img.png", "notes/n.md") == "att/img.png"
    assert r.resolve("Other note", "notes/n.md") == "Other note.md"

def test_resolve_ambiguous_name_prefers_shortest_path(vault):
    assert LinkResolver(vault).resolve("x.png", "notes/n.md") == "z/x.png"

def test_resolve_ambiguous_name_prefers_document_folder(vault):
    assert LinkResolver(vault).resolve("x.png", "deep/folder/n.md") == "deep/folder/x.png"

def test_resolve_decodes_and_strips_subpath(vault):
    r = LinkResolver(vault)
    assert r.resolve("my%20img.png", "notes/n.md") == "att/my img.png"
    assert r.resolve("../att/doc.pdf#page=3", "notes/n.md") == "att/doc.pdf"

def test_resolve_unresolved(vault):
    r = LinkResolver(vault)
    assert r.resolve("missing.png", "notes/n.md") is None
    assert r.resolve("../missing.png", "notes/n.md") is None
    assert r.resolve("#heading", "notes/n.md") is None

def test_resolve_with_extra_paths(vault):
    r = LinkResolver(vault)
    assert r.resolve("gone.png", "notes/n.md") is None
    assert r.resolve("gone.png", "notes/n.md", extra=("att/gone.png",)) == "att/gone.png"
    assert r.resolve("../att/gone.png", "notes/n.md", extra=("att/gone.png",)) == "att/gone.png"

def test_files_named_follows_renames_and_deletes(vault):
    assert vault.files_named("x.png") == {"deep/folder/x.png", "z/x.png"}
    vault.rename("z/x.png", "z/y.png")
    assert vault.files_named("x.png") == {"deep/folder/x.png"}
    assert vault.files_named("y.png") == {"z/y.png"}
    vault.delete("z/y.png")
    assert vault.files_named("y.png") == set()

def test_link_name():
    assert link_name("../att/my%20img.png#page=2") == "my img.png"
    assert link_name("Some note#Heading") == "Some note"
