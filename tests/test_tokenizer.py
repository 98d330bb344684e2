import io

import pytest

from perfmon_analyzer.errors import FatalError
from perfmon_analyzer.service.tokenizer import StanzaReader, parse_input_line, open_input
from conftest import reader_for


def test_splits_on_whitespace_and_skips_leading_blanks():
    assert parse_input_line("   sda\t10  100\n") == ["sda", "10", "100"]


def test_comment_ends_the_line():
    assert parse_input_line("3 10 # count interval\n") == ["3", "10"]
    assert parse_input_line("# only a comment\n") == []
    assert parse_input_line("   # indented comment\n") == []


def test_comment_marker_inside_a_field_is_kept():
    assert parse_input_line("a#b c\n") == ["a#b", "c"]


def test_blank_line_is_the_end_of_stanza_sentinel():
    assert parse_input_line("\n") == []
    assert parse_input_line("") == []


def test_quoted_field_keeps_whitespace():
    assert parse_input_line("singlefiledateformat '%d/%m %H:%M' # comment\n") == [
        "singlefiledateformat", "%d/%m %H:%M",
    ]


def test_quote_protects_comment_marker():
    assert parse_input_line("key '# not a comment'\n") == ["key", "# not a comment"]


def test_unterminated_quote_runs_to_end_of_line():
    assert parse_input_line("key 'a b\n") == ["key", "a b"]


def test_fields_past_maximum_are_dropped():
    fields = parse_input_line("1 2 3 4\n", maxfields=2)
    assert fields == ["1", "2"]
    assert len(fields) == 2


def test_skip_to_stanza_counts_lines():
    reader = reader_for("junk\nmore junk\nDATE:\n1700000000\n")
    assert reader.skip_to_stanza("DATE:")
    assert reader.line_number == 3
    assert reader.read_fields() == ["1700000000"]
    assert reader.read_fields() is None


def test_header_must_match_the_whole_line():
    reader = reader_for("DATE: extra\n DATE:\n")
    assert reader.skip_to_stanza("DATE:", mandatory=False) is False


def test_missing_mandatory_stanza_is_fatal():
    reader = reader_for("nothing here\n")
    with pytest.raises(FatalError, match="TIME_VALUES:"):
        reader.skip_to_stanza("TIME_VALUES:")


def test_rewind_resets_line_counter():
    reader = reader_for("a\nb\n")
    reader.readline()
    reader.readline()
    assert reader.rewind()
    assert reader.line_number == 0
    assert reader.read_fields() == ["a"]


def test_stdin_is_never_rewound():
    reader = StanzaReader(io.StringIO("a\nb\n"), name="<stdin>", is_stdin=True)
    reader.readline()
    assert reader.rewind() is False
    assert reader.read_fields() == ["b"]


def test_dash_opens_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("x\n"))
    reader = open_input("-")
    assert reader.is_stdin
    assert reader.read_fields() == ["x"]


def test_missing_input_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        open_input(str(tmp_path / "absent.pmc"))


def test_open_input_replaces_undecodable_bytes(tmp_path):
    path = tmp_path / "bytes.pmc"
    path.write_bytes(b"dev\xf6 12\n")
    with open_input(str(path)) as reader:
        assert reader.read_fields() == ["dev\ufffd", "12"]
