import io
import os
import time
from pathlib import Path

import pytest

from perfmon_analyzer.service.tokenizer import StanzaReader

# Two classes, two blocks: CPU is a vector class using every row, IO is an
# array class with two devices that skips the first time row.
HEADER = """\
# pmc test data
TIME_VALUES:
3 10 # count interval

METADATA:
CPU V 1 cpu_us cpu_sy
IO A 2 tps rkb

"""

BLOCK_1 = """\
DATE:
1700000000

CPU:
1 2
3 4
5 6

IO:
sda 10 100
sdb 20 200
sda 11 110
sdb 21 210
sda 12 120
sdb 22 220

"""

BLOCK_2 = """\
DATE:
1700000030

CPU:
7 8
9 10
11 12

IO:
sda 13 130
sdb 23 230
sda 14 140
sdb 24 240
sda 15 150
sdb 25 250

"""

SAMPLE = HEADER + BLOCK_1 + BLOCK_2


def reader_for(text: str, name: str = "sample") -> StanzaReader:
    return StanzaReader(io.StringIO(text), name=name)


def write_file(path: Path, text: str) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return str(path)


@pytest.fixture
def utc():
    """Pin local time to UTC so clock arithmetic is predictable"""
    old = os.environ.get("TZ")
    os.environ["TZ"] = "UTC"
    time.tzset()
    yield
    if old is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = old
    time.tzset()


@pytest.fixture
def sample_file(tmp_path: Path) -> str:
    return write_file(tmp_path / "sample.pmc", SAMPLE)
