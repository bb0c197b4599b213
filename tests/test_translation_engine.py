import logging

import pytest

from silkymerge.config import MergeSettings
from silkymerge.diagnostics import STRUCTURAL, MergeError
from silkymerge.name_table import NameTable
from silkymerge.translation_engine import BatchRunner, ScriptMerger, find_source_file

from helpers import op, script, uncrypt, write_cp932

SCRIPT = script(["#2-0"], op("PUSH_STR", '["【佐藤】"]'), uncrypt("こんにちは。"), op("MESSAGE"),
                uncrypt("元気？"), op("TO_NEW_STRING"), uncrypt("うん。"), op("MESSAGE", "[1]"))

TRANSLATION = "こんにちは。\nHello.\n\\\n元気？うん。\nHow are you? Fine.\n\\\n"

EXPECTED = [
    "#2-0",
    "#1-PUSH_STR", '["Sato"]',
    "#1-STR_UNCRYPT", '["Hello."]',
    "#1-MESSAGE", "[0]",
    "#1-STR_UNCRYPT", '["How are you? Fine."]',
    "#1-MESSAGE", "[1]",
    "",
]


@pytest.fixture
def workspace(tmp_path):
    src, tl, out = tmp_path / "src", tmp_path / "tl", tmp_path / "out"
    src.mkdir()
    tl.mkdir()
    write_cp932(src / "TEST.txt", SCRIPT)
    (tl / "test.txt").write_text(TRANSLATION, encoding="utf-8")
    (tl / "nametable.txt").write_text("佐藤\tSato\n", encoding="utf-8")
    return src, tl, out


def test_batch_writes_patched_script(workspace):
    src, tl, out = workspace
    summary = BatchRunner(str(src), str(tl), str(out)).run()

    assert summary.processed == 1
    assert summary.failed == 0
    outcome = summary.outcomes[0]
    assert outcome.name == "test.txt"
    assert outcome.lines == 2
    assert outcome.matched == 2
    assert outcome.errors == 0
    expected = "".join(line + "\r\n" for line in EXPECTED)
    assert (out / "TEST.txt").read_bytes() == expected.encode("utf-8")


def test_orphan_translation_is_reported(workspace, caplog):
    src, tl, out = workspace
    (tl / "extra.txt").write_text("はい。\nYes.\n\\\n", encoding="utf-8")
    with caplog.at_level(logging.INFO):
        summary = BatchRunner(str(src), str(tl), str(out)).run()

    assert summary.processed == 2
    assert summary.failed == 1
    assert "Couldn't find corresponding script file for extra.txt" in caplog.text
    assert "Run complete!" in caplog.text
    assert (out / "TEST.txt").exists()


def test_other_files_are_skipped(workspace, caplog):
    src, tl, out = workspace
    (tl / "notes.md").write_text("todo", encoding="utf-8")
    with caplog.at_level(logging.INFO):
        summary = BatchRunner(str(src), str(tl), str(out)).run()

    assert summary.skipped == ["notes.md"]
    assert summary.processed == 1
    assert "Skipping notes.md-- not a .txt" in caplog.text


def test_undecodable_script_does_not_stop_batch(workspace):
    src, tl, out = workspace
    (src / "BAD.txt").write_bytes(b"#1-STR_UNCRYPT\r\n\x81")
    (tl / "bad.txt").write_text("はい。\nYes.\n\\\n", encoding="utf-8")
    summary = BatchRunner(str(src), str(tl), str(out)).run()

    bad, good = summary.outcomes
    assert bad.name == "bad.txt" and not bad.succeeded
    assert good.succeeded
    assert (out / "TEST.txt").exists()


def test_merge_reports_structural_error(tmp_path):
    tl = tmp_path / "bad.txt"
    tl.write_text("はい。\nYes.\n\\\n", encoding="utf-8")
    source = tmp_path / "BAD.txt"
    source.write_bytes(b"\x81")
    outcome, report = ScriptMerger(NameTable()).merge(str(tl), str(source),
                                                      str(tmp_path / "out.txt"))
    assert outcome.errors == 1
    assert [d.kind for d in report.errors] == [STRUCTURAL]


def test_missing_directories(tmp_path):
    with pytest.raises(MergeError, match="Cannot find script source directory"):
        BatchRunner(str(tmp_path / "nope"), str(tmp_path), str(tmp_path / "out")).check_dirs()
    with pytest.raises(MergeError, match="Cannot find English script directory"):
        BatchRunner(str(tmp_path), str(tmp_path / "nope"), str(tmp_path / "out")).check_dirs()


def test_output_dir_is_created(workspace):
    src, tl, out = workspace
    BatchRunner(str(src), str(tl), str(out / "nested")).check_dirs()
    assert (out / "nested").is_dir()


def test_error_limit_comes_from_settings(workspace):
    src, tl, out = workspace
    (tl / "nametable.txt").unlink()
    settings = MergeSettings(max_errors=1)
    summary = BatchRunner(str(src), str(tl), str(out), settings=settings).run()
    outcome = summary.outcomes[0]
    assert outcome.aborted
    assert (out / "TEST.txt").read_bytes() == b"#2-0\r\n\r\n"


def test_find_source_file_ignores_case(workspace):
    src, _, _ = workspace
    assert find_source_file(str(src), "test.txt").endswith("TEST.txt")
    assert find_source_file(str(src), "missing.txt") is None
