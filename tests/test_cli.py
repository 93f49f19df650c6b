import json

import pytest
from click.testing import CliRunner

from copycraft import __version__
from copycraft.cli.main import cli
from copycraft.config import Config


DOC = "Intro\n# A\n<agent><prompt>a</prompt></agent>\n# B\ntext <agent><prompt>b</prompt></agent> end\n"

FLAT = (
    "=== Getting Started ===\n"
    "--- Basics ---\n"
    "+++ Welcome +++\n"
    "Hello <agent><prompt>greet</prompt></agent>\n"
    "+++ Setup +++\n"
    "Install things.\n"
)


@pytest.fixture
def invoke(tmp_path, generator):
    runner = CliRunner()

    def _invoke(*args, input=None):
        config = Config(content_dir=str(tmp_path / "content"), memory_dir=str(tmp_path / "memory"))
        obj = {"config": config, "generator": generator}
        return runner.invoke(cli, list(args), obj=obj, input=input)

    return _invoke


@pytest.fixture
def doc_file(tmp_path):
    path = tmp_path / "draft.md"
    path.write_text(DOC, encoding="utf-8")
    return path


@pytest.fixture
def imported(invoke, tmp_path):
    path = tmp_path / "flat.txt"
    path.write_text(FLAT, encoding="utf-8")
    result = invoke("tree", "import", str(path))
    assert result.exit_code == 0
    return tmp_path / "content"


def test_version(invoke):
    result = invoke("--version")

    assert result.exit_code == 0
    assert __version__ in result.output


def test_bad_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "copycraft.yaml"
    path.write_text("colour: blue\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(path), "tree", "show"])

    assert result.exit_code == 1
    assert "❌ Error loading configuration" in result.output
    assert "colour" in result.output


class TestDocumentCommands:
    def test_parse_json(self, invoke, doc_file):
        result = invoke("parse", str(doc_file), "--json")

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [s["prompt"] for s in data["segments"]] == ["a", "b"]
        assert [c["id"] for c in data["chunks"]] == ["chunk-preamble", "chunk-0", "chunk-1"]

    def test_parse_summary(self, invoke, doc_file):
        result = invoke("parse", str(doc_file))

        assert result.exit_code == 0
        assert "3 sections" in result.output
        assert "2 tasks" in result.output

    def test_process_in_place(self, invoke, doc_file):
        result = invoke("process", str(doc_file))

        assert result.exit_code == 0
        assert "Processed 2 tasks" in result.output
        assert doc_file.read_text(encoding="utf-8") == "Intro\n# A\n[a]\n# B\ntext [b] end\n"

    def test_process_to_output_with_memory(self, invoke, doc_file, tmp_path, generator):
        memory_dir = tmp_path / "memory"
        memory_dir.mkdir()
        (memory_dir / "style.md").write_text("Be brief.", encoding="utf-8")
        output = tmp_path / "out.md"

        result = invoke("process", str(doc_file), "-m", "style.md", "-o", str(output))

        assert result.exit_code == 0
        assert output.read_text(encoding="utf-8") == "Intro\n# A\n[a]\n# B\ntext [b] end\n"
        assert doc_file.read_text(encoding="utf-8") == DOC
        assert generator.calls[0]["memory"] == {"style.md": "Be brief."}

    def test_process_with_missing_memory(self, invoke, doc_file, generator):
        result = invoke("process", str(doc_file), "-m", "nope.md")

        assert result.exit_code == 1
        assert "❌ Error processing document" in result.output
        assert generator.calls == []

    def test_process_segment(self, invoke, doc_file, generator):
        result = invoke("process-segment", str(doc_file), "1", "-c", "chunk-0")

        assert result.exit_code == 0
        assert "chunk-1" in result.output
        assert doc_file.read_text(encoding="utf-8") == (
            "Intro\n# A\n<agent><prompt>a</prompt></agent>\n# B\ntext [b] end\n"
        )
        assert generator.calls[0]["context"].endswith("# A\n<agent><prompt>a</prompt></agent>\n")

    def test_process_segment_bad_index(self, invoke, doc_file):
        result = invoke("process-segment", str(doc_file), "7")

        assert result.exit_code == 1
        assert "Invalid segment index 7" in result.output
        assert doc_file.read_text(encoding="utf-8") == DOC


class TestTreeCommands:
    def test_import_and_show(self, invoke, imported):
        result = invoke("tree", "show")

        assert result.exit_code == 0
        assert "📦 Getting Started [001-getting-started]" in result.output
        assert "📄 Welcome [001-welcome.md] (1 tasks)" in result.output

    def test_import_reports_dropped_lines(self, invoke, tmp_path):
        path = tmp_path / "flat.txt"
        path.write_text("stray\n" + FLAT, encoding="utf-8")

        result = invoke("tree", "import", str(path))

        assert result.exit_code == 0
        assert "1 lines outside any page were skipped" in result.output

    def test_show_json(self, invoke, imported):
        result = invoke("tree", "show", "--json")

        data = json.loads(result.output)
        assert data[0]["title"] == "Getting Started"
        assert [p["title"] for p in data[0]["chapters"][0]["pages"]] == ["Welcome", "Setup"]

    def test_show_empty(self, invoke):
        result = invoke("tree", "show")

        assert "No content yet" in result.output

    def test_create_commands(self, invoke, tmp_path):
        assert invoke("tree", "create-module", "Intro").exit_code == 0
        assert invoke("tree", "create-chapter", "001-intro", "Basics").exit_code == 0
        result = invoke("tree", "create-page", "001-intro", "001-basics", "First")

        assert result.exit_code == 0
        assert "001-intro/001-basics/001-first.md" in result.output
        assert (tmp_path / "content" / "001-intro" / "001-basics" / "001-first.md").is_file()

    def test_create_chapter_in_missing_module(self, invoke):
        result = invoke("tree", "create-chapter", "001-none", "Basics")

        assert result.exit_code == 1
        assert "❌ Error creating chapter" in result.output

    def test_rename(self, invoke, imported):
        result = invoke("tree", "rename", "chapter", "001-getting-started/001-basics", "Fundamentals")

        assert result.exit_code == 0
        assert (imported / "001-getting-started" / "001-fundamentals").is_dir()

    def test_reorder(self, invoke, imported):
        result = invoke(
            "tree", "reorder", "page", "002-setup.md", "001-welcome.md",
            "--parent", "001-getting-started/001-basics",
        )

        assert result.exit_code == 0
        chapter = imported / "001-getting-started" / "001-basics"
        assert sorted(p.name for p in chapter.iterdir()) == ["001-setup.md", "002-welcome.md"]

    def test_delete_needs_confirmation(self, invoke, imported):
        result = invoke("tree", "delete", "module", "001-getting-started", input="n\n")

        assert result.exit_code == 1
        assert (imported / "001-getting-started").is_dir()

    def test_delete(self, invoke, imported):
        result = invoke("tree", "delete", "module", "001-getting-started", "--yes")

        assert result.exit_code == 0
        assert not (imported / "001-getting-started").exists()

    def test_delete_root_is_refused(self, invoke, imported):
        result = invoke("tree", "delete", "module", "", "--yes")

        assert result.exit_code == 1
        assert "❌ Error deleting module" in result.output
        assert (imported / "001-getting-started").is_dir()

    def test_export(self, invoke, imported):
        result = invoke("tree", "export")

        assert result.exit_code == 0
        assert result.output == (
            "=== Getting Started ===\n\n"
            "--- Basics ---\n\n"
            "+++ Welcome +++\nHello <agent><prompt>greet</prompt></agent>\n\n"
            "+++ Setup +++\nInstall things.\n\n"
        )


class TestPageCommands:
    def test_show(self, invoke, imported):
        result = invoke("page", "show", "001-getting-started", "001-basics", "001-welcome.md")

        assert result.exit_code == 0
        assert "Getting Started > Basics > Welcome" in result.output
        assert "0. (prompt) greet" in result.output

    def test_show_missing(self, invoke, imported):
        result = invoke("page", "show", "001-getting-started", "001-basics", "009-none.md")

        assert result.exit_code == 1
        assert "❌ Error reading page" in result.output

    def test_write(self, invoke, imported, tmp_path):
        source = tmp_path / "body.md"
        source.write_text("New <agent><prompt>x</prompt></agent>", encoding="utf-8")

        result = invoke("page", "write", "001-getting-started", "001-basics", "002-setup.md", str(source))

        assert result.exit_code == 0
        assert "(1 tasks)" in result.output
        raw = (imported / "001-getting-started" / "001-basics" / "002-setup.md").read_text(encoding="utf-8")
        assert raw == "<!-- title: Getting Started > Basics > Setup -->\nNew <agent><prompt>x</prompt></agent>"

    def test_process(self, invoke, imported, generator):
        result = invoke("page", "process", "001-getting-started", "001-basics", "001-welcome.md", "0")

        assert result.exit_code == 0
        assert "[greet]" in result.output
        raw = (imported / "001-getting-started" / "001-basics" / "001-welcome.md").read_text(encoding="utf-8")
        assert raw.endswith("Hello [greet]\n")


class TestMemoryCommands:
    def test_lifecycle(self, invoke, tmp_path):
        source = tmp_path / "note.md"
        source.write_text("Remember this.", encoding="utf-8")

        assert "No memory files" in invoke("memory", "list").output

        assert invoke("memory", "save", "style.md", str(source)).exit_code == 0
        assert "style.md" in invoke("memory", "list").output

        assert invoke("memory", "rename", "style.md", "tone.md").exit_code == 0
        assert (tmp_path / "memory" / "tone.md").read_text(encoding="utf-8") == "Remember this."

        assert invoke("memory", "delete", "tone.md", "--yes").exit_code == 0
        assert not (tmp_path / "memory" / "tone.md").exists()

    def test_rename_missing(self, invoke):
        result = invoke("memory", "rename", "a.md", "b.md")

        assert result.exit_code == 1
        assert "❌ Error renaming memory file" in result.output
