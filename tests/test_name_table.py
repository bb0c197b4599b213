from silkymerge.diagnostics import CONSISTENCY, STRUCTURAL, Report
from silkymerge.name_table import NameTable


def load(rows):
    report = Report("nametable.txt")
    table = NameTable()
    table.parse_lines(rows, report)
    return table, report


def test_two_columns_map_jp_to_en():
    table, report = load(["佐藤\tSato", "山田\tYamada"])
    assert table.lookup("佐藤") == "Sato"
    assert table.lookup("山田") == "Yamada"
    assert len(table) == 2
    assert report.diagnostics == []


def test_name_without_translation_maps_to_itself():
    table, report = load(["山田"])
    assert table.lookup("山田") == "山田"
    need = [d for d in report.warnings if "Need a TL for name" in d.message]
    assert len(need) == 1
    assert need[0].kind == CONSISTENCY


def test_blank_rows_are_ignored():
    table, report = load(["", "佐藤\tSato", "\r"])
    assert len(table) == 1
    assert report.diagnostics == []


def test_extra_columns_are_malformed():
    table, report = load(["佐藤\tSato\tSatou"])
    assert "佐藤" not in table
    assert [d.kind for d in report.errors] == [STRUCTURAL]
    assert report.errors[0].line_no == 1


def test_unknown_name_warned_once():
    table = NameTable({"佐藤": "Sato"})
    report = Report("ep01.txt")
    assert table.translate("佐藤", report) == "Sato"
    assert table.translate("鈴木", report, 4) is None
    assert table.translate("鈴木", report, 9) is None
    assert len(report.warnings) == 1
    assert report.warnings[0].line_no == 4
    assert "鈴木" in table.unseen_names


def test_load_reads_utf8_with_bom(tmp_path):
    path = tmp_path / "nametable.txt"
    path.write_bytes("\ufeff佐藤\tSato\r\n鈴木\tSuzuki\r\n".encode("utf-8"))
    report = Report("nametable.txt")
    table = NameTable.load(str(path), report)
    assert table.lookup("佐藤") == "Sato"
    assert table.lookup("鈴木") == "Suzuki"
    assert report.diagnostics == []


def test_missing_file_gives_empty_table(tmp_path):
    report = Report("nametable.txt")
    table = NameTable.load(str(tmp_path / "nametable.txt"), report)
    assert len(table) == 0
    assert [d.kind for d in report.warnings] == [STRUCTURAL]
