"""
Issue model — one validation or loading finding.

Validation problems are data, not exceptions: every check appends an
``Issue`` and the caller decides what an error means for it.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Issue(BaseModel):
    """A single finding against a document."""

    severity: Severity
    code: str                 # stable identifier, e.g. "primary-count"
    message: str
    source: str = ""          # file path, with "#n" for multi-document files
    document: str = ""        # document ref, e.g. "Module/payments@2.1.0"
    path: str = ""            # field path inside the document

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def __str__(self) -> str:
        where = " ".join(p for p in (self.document or self.source, self.path) if p)
        return f"{where}: {self.message}" if where else self.message


def error(code: str, message: str, **where: str) -> Issue:
    return Issue(severity=Severity.ERROR, code=code, message=message, **where)


def warning(code: str, message: str, **where: str) -> Issue:
    return Issue(severity=Severity.WARNING, code=code, message=message, **where)
