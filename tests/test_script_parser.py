from silkymerge.script_parser import (Event, ParserState, ScriptParser, TRANSITIONS,
                                      classify, literal_text, opcode_of)

from helpers import op, script, uncrypt, write_cp932


def parse(*chunks):
    result, _ = ScriptParser("ep01.txt").parse_lines(script(*chunks))
    return result.lines


def test_opcode_of():
    assert opcode_of("#1-STR_UNCRYPT") == "STR_UNCRYPT"
    assert opcode_of('["text"]') is None
    assert opcode_of("#3") is None


def test_classify():
    assert classify("#1-MESSAGE") is Event.MESSAGE
    assert classify("#1-PUSH") is Event.OTHER
    assert classify("#2-14") is Event.OTHER
    assert classify("[0]") is Event.TEXT
    assert classify("") is None


def test_literal_text():
    assert literal_text('["『こんにちは』"]') == "こんにちは"
    assert literal_text('["あ\\rい"]') == "あい"


def test_every_state_accepts_uncrypt():
    for state in ParserState:
        if state is ParserState.AWAIT_TEXT:
            continue
        assert TRANSITIONS[(state, Event.UNCRYPT)][1] is ParserState.AWAIT_TEXT


def test_message_bounds_lines():
    lines = parse(uncrypt("こんにちは。"), op("MESSAGE"),
                  uncrypt("さようなら。"), op("MESSAGE"))
    assert [ln.jp_sublines for ln in lines] == [["こんにちは。"], ["さようなら。"]]
    assert lines[0].line_no == 2


def test_continuation_joins_sublines():
    lines = parse(uncrypt("それでは"), op("TO_NEW_STRING"), uncrypt("行こうか"), op("MESSAGE"))
    assert len(lines) == 1
    assert lines[0].jp_sublines == ["それでは", "行こうか"]
    assert lines[0].combined_jp_line == "それでは行こうか"
    assert not lines[0].is_split_forced


def test_code_inside_continuation_forces_split():
    lines = parse(uncrypt("そうか。"), op("TO_NEW_STRING"), op("PUSH", "[1]"),
                  uncrypt("行こう。"), op("MESSAGE"))
    assert len(lines) == 1
    assert lines[0].is_split_forced


def test_label_inside_continuation_forces_split():
    lines = parse(uncrypt("そうか。"), op("TO_NEW_STRING"), ["#2-14"],
                  uncrypt("行こう。"))
    assert lines[0].is_split_forced


def test_code_between_literals_starts_new_line():
    lines = parse(uncrypt("はい。"), op("PUSH", "[1]"), uncrypt("いいえ。"))
    assert [ln.jp_sublines for ln in lines] == [["はい。"], ["いいえ。"]]
    assert not lines[1].is_split_forced


def test_return_after_text_is_a_newline():
    lines = parse(uncrypt("あのね、"), op("RETURN", "[]"), uncrypt("聞いて。"), op("MESSAGE"))
    assert [ln.jp_sublines for ln in lines] == [["あのね、", "聞いて。"]]


def test_uncrypt_without_continuation_starts_new_line():
    lines = parse(uncrypt("はい。"), uncrypt("いいえ。"))
    assert len(lines) == 2


def test_filler_glyph_is_dropped():
    lines = parse(uncrypt("・"), op("MESSAGE"), uncrypt("はい。"))
    assert [ln.jp_sublines for ln in lines] == [["はい。"]]


def test_operands_of_other_opcodes_are_ignored():
    lines = parse(op("PUSH_STR", '["【佐藤】"]'), uncrypt("はい。"))
    assert [ln.jp_sublines for ln in lines] == [["はい。"]]


def test_new_line_after_forced_split_is_clean():
    lines = parse(uncrypt("そうか。"), op("TO_NEW_STRING"), op("PUSH", "[1]"),
                  uncrypt("行こう。"), op("MESSAGE"), uncrypt("うん。"))
    assert lines[0].is_split_forced
    assert not lines[1].is_split_forced


def test_parse_file(tmp_path):
    path = tmp_path / "ep01.txt"
    write_cp932(path, script(uncrypt("『こんにちは。』"), op("MESSAGE")))
    result, report = ScriptParser("ep01.txt").parse_file(str(path))
    assert result.total == 1
    assert result.lines[0].jp_sublines == ["こんにちは。"]
    assert report.diagnostics == []
