from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel

from ..errors import SplitError


class Severity(StrEnum):
    error = "error"
    warning = "warning"


class Diagnostic(BaseModel):
    severity: Severity
    summary: str
    detail: str | None = None


Diagnostics = list[Diagnostic]


def diagnostics_from_error(exc: Exception) -> Diagnostics:
    summary = exc.message if isinstance(exc, SplitError) else str(exc)
    detail = type(exc).__name__
    return [Diagnostic(severity=Severity.error, summary=summary, detail=detail)]


def has_errors(diagnostics: Diagnostics) -> bool:
    return any(d.severity == Severity.error for d in diagnostics)
