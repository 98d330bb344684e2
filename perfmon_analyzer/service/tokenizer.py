"""
Stanza tokenizer for pmc-format input files.

A stanza starts with a header line (``TIME_VALUES:``, ``METADATA:``,
``DATE:`` or ``<classname>:``) and its data lines run until a blank or
comment-only line.
"""
import logging
import sys
from typing import IO, List, Optional

from perfmon_analyzer.errors import FatalError

logger = logging.getLogger(__name__)

QUOTE_CHAR = "'"
COMMENT_CHAR = "#"
STANZA_TERM_CHAR = ":"
STDIN_FILENAME = "-"
INPUT_ENCODING = "utf-8"
DECODE_ERRORS = "replace"

WHITESPACE = " \t\n\r"


def parse_input_line(line: str, maxfields: Optional[int] = None,
                     comment_char: str = COMMENT_CHAR,
                     quote_char: str = QUOTE_CHAR) -> List[str]:
    """
    Split a line into whitespace separated fields.

    A comment character at the start of a field ends the line. A field that
    starts with the quote character runs to the next quote character and may
    contain whitespace; the quotes are dropped. Fields past ``maxfields`` are
    ignored.

    Returns:
        The fields found; an empty list for a blank or comment-only line
    """
    fields: List[str] = []
    end = len(line)
    pos = 0

    while pos < end and line[pos] in WHITESPACE:
        pos += 1

    while pos < end:
        if line[pos] == comment_char:
            break
        if maxfields is not None and len(fields) >= maxfields:
            break

        if line[pos] == quote_char:
            close = line.find(quote_char, pos + 1)
            if close < 0:
                close = len(line.rstrip("\r\n"))
            fields.append(line[pos + 1:close])
            pos = close + 1
        else:
            start = pos
            while pos < end and line[pos] not in WHITESPACE:
                pos += 1
            fields.append(line[start:pos])

        while pos < end and line[pos] in WHITESPACE:
            pos += 1

    return fields


class StanzaReader:
    """Line source for one input file, with a line counter for diagnostics"""

    def __init__(self, stream: IO[str], name: str = "<stream>", is_stdin: bool = False):
        self.stream = stream
        self.name = name
        self.is_stdin = is_stdin
        self.line_number = 0

    def readline(self) -> Optional[str]:
        """Next raw line, or None at end of input"""
        line = self.stream.readline()
        if not line:
            return None
        self.line_number += 1
        return line

    def read_fields(self, maxfields: Optional[int] = None) -> Optional[List[str]]:
        """Tokenized next line, or None at end of input"""
        line = self.readline()
        if line is None:
            return None
        return parse_input_line(line, maxfields)

    def skip_to_stanza(self, header: str, mandatory: bool = True) -> bool:
        """Read and ignore lines until one equal to ``header``"""
        while True:
            line = self.readline()
            if line is None:
                break
            if line.rstrip("\r\n") == header:
                return True
        if mandatory:
            raise FatalError(f"Data file stanza '{header}' not found in {self.name}")
        return False

    def rewind(self) -> bool:
        """Go back to the first line; standard input and pipes cannot"""
        if self.is_stdin or not self.stream.seekable():
            return False
        self.stream.seek(0)
        self.line_number = 0
        return True

    def close(self):
        if not self.is_stdin:
            self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def open_input(path: str) -> StanzaReader:
    """
    Open an input file; ``-`` means standard input. Raises OSError

    Input is read as UTF-8; undecodable bytes become U+FFFD instead of
    aborting the run.
    """
    if path == STDIN_FILENAME:
        if hasattr(sys.stdin, "reconfigure"):
            sys.stdin.reconfigure(encoding=INPUT_ENCODING, errors=DECODE_ERRORS)
        return StanzaReader(sys.stdin, name="<stdin>", is_stdin=True)
    return StanzaReader(open(path, "r", encoding=INPUT_ENCODING, errors=DECODE_ERRORS), name=path)
