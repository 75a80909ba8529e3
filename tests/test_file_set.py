"""Tests for the file set model and file selection."""

from models.schemas import GeneratedFile
from services.file_set import FileSelection, FileSet


def _files(*names):
    return [GeneratedFile(filename=n, content=f"content of {n}") for n in names]


class TestReplaceAndFind:
    def test_find_returns_each_installed_file(self):
        fs = FileSet()
        files = _files("manifest.json", "popup.html", "popup.js")
        fs.replace(files)
        for f in files:
            assert fs.find(f.filename) == f

    def test_find_absent_filename(self):
        fs = FileSet(_files("popup.html"))
        assert fs.find("popup.js") is None
        assert fs.find("") is None

    def test_replace_discards_previous_set(self):
        fs = FileSet(_files("a.js", "b.js"))
        fs.replace(_files("c.js"))
        assert fs.filenames() == ["c.js"]
        assert fs.find("a.js") is None

    def test_order_is_preserved(self):
        fs = FileSet(_files("z.js", "a.js", "m.js"))
        assert fs.filenames() == ["z.js", "a.js", "m.js"]

    def test_duplicate_filename_last_write_wins_in_first_position(self):
        fs = FileSet([
            GeneratedFile(filename="a.js", content="old"),
            GeneratedFile(filename="b.js", content="b"),
            GeneratedFile(filename="a.js", content="new"),
        ])
        assert fs.filenames() == ["a.js", "b.js"]
        assert fs.find("a.js").content == "new"
        assert len(fs) == 2

    def test_accepts_plain_dicts(self):
        fs = FileSet([{"filename": "popup.js", "content": "x"}])
        assert fs.find("popup.js").content == "x"


class TestResolveReference:
    def test_exact_match(self):
        fs = FileSet(_files("popup.js"))
        assert fs.resolve_reference("popup.js").filename == "popup.js"

    def test_leading_dot_slash_is_stripped(self):
        fs = FileSet(_files("popup.js"))
        assert fs.resolve_reference("./popup.js").filename == "popup.js"

    def test_other_prefixes_do_not_match(self):
        fs = FileSet(_files("popup.js"))
        assert fs.resolve_reference("/popup.js") is None
        assert fs.resolve_reference("js/popup.js") is None


class TestSelection:
    def test_revalidate_picks_first_file_when_nothing_selected(self):
        fs = FileSet(_files("manifest.json", "popup.js"))
        sel = FileSelection()
        assert sel.revalidate(fs) == "manifest.json"

    def test_selection_survives_when_file_still_present(self):
        fs = FileSet(_files("manifest.json", "popup.js"))
        sel = FileSelection()
        assert sel.select(fs, "popup.js")
        fs.replace(_files("popup.js", "other.js"))
        assert sel.revalidate(fs) == "popup.js"

    def test_selection_resets_when_file_disappears(self):
        fs = FileSet(_files("manifest.json", "popup.js"))
        sel = FileSelection()
        sel.select(fs, "popup.js")
        fs.replace(_files("background.js", "manifest.json"))
        assert sel.revalidate(fs) == "background.js"

    def test_empty_set_clears_selection(self):
        sel = FileSelection()
        sel.selected = "popup.js"
        assert sel.revalidate(FileSet()) is None

    def test_cannot_select_missing_file(self):
        fs = FileSet(_files("popup.js"))
        sel = FileSelection()
        assert not sel.select(fs, "missing.js")
        assert sel.selected is None
