"""Tests for the command line entry point."""

import logging

import orjson
import pytest

from note_search import cli


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put pytest's handlers back afterwards."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def notes_file(tmp_path):
    path = tmp_path / "notes.jsonl"
    lines = [
        {"id": "d1", "text": "the cat sat"},
        {"id": "d2", "text": "the dog sat on the cat"},
    ]
    path.write_bytes(b"\n".join(orjson.dumps(line) for line in lines) + b"\n\n")
    return path


@pytest.mark.unit
def test_load_notes_skips_blank_lines(notes_file):
    assert [note["id"] for note in cli.load_notes(notes_file)] == ["d1", "d2"]


@pytest.mark.unit
def test_load_notes_reports_bad_line(tmp_path):
    path = tmp_path / "bad.jsonl"
    path.write_text('{"id": "d1", "text": "ok"}\n{oops\n')

    with pytest.raises(ValueError, match="bad.jsonl:2"):
        cli.load_notes(path)


@pytest.mark.unit
def test_search_prints_postings(notes_file, capsys):
    assert cli.main([str(notes_file), "cat", "zzz"]) == 0

    output = capsys.readouterr().out
    payload = orjson.loads(output[output.index("{\n") :])
    assert payload["cat"][0]["positions"] == {"d1": [1], "d2": [5]}
    assert "zzz" not in payload


@pytest.mark.unit
def test_rank_prints_ordered_ids(notes_file, capsys):
    assert cli.main([str(notes_file), "cat", "--rank", "--limit", "1"]) == 0

    output = capsys.readouterr().out
    payload = orjson.loads(output[output.index("{\n") :])
    assert [item["doc_id"] for item in payload["ranked"]] == ["d1"]


@pytest.mark.unit
def test_missing_file_returns_error(tmp_path):
    assert cli.main([str(tmp_path / "missing.jsonl"), "cat"]) == 1
