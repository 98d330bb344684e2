"""
Error model for the analyzer.

Fatal problems raise FatalError and end the run. Everything else is reported
through Diagnostics, which logs it and keeps a record so the run can finish
with best-effort output.
"""
import logging
from collections import Counter
from typing import List, Optional
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class FatalError(Exception):
    """Unrecoverable input, configuration or output problem"""


class Diagnostic(BaseModel):
    """One recoverable problem seen during the run"""
    kind: str
    message: str
    source: Optional[str] = None
    line: Optional[int] = None


class Diagnostics:
    """Collects recoverable problems and logs them as they happen"""

    def __init__(self):
        self.records: List[Diagnostic] = []
        self.counts = Counter()

    def report(self, kind: str, message: str, source: Optional[str] = None,
               line: Optional[int] = None) -> Diagnostic:
        record = Diagnostic(kind=kind, message=message, source=source, line=line)
        self.records.append(record)
        self.counts[kind] += 1

        where = ""
        if source is not None:
            where = f"{source}:{line}: " if line is not None else f"{source}: "
        logger.warning("%s%s", where, message)
        return record

    def count(self, kind: Optional[str] = None) -> int:
        if kind is None:
            return len(self.records)
        return self.counts[kind]

    def __len__(self):
        return len(self.records)
