"""Diagnostic message collection for input processing.

Messages are batched during a pass so that every configuration problem is
reported together; the caller decides when to escalate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, List

logger = logging.getLogger(__name__)


class Severity(IntEnum):
    INFO = logging.INFO
    WARNING = logging.WARNING
    SEVERE = logging.ERROR
    FATAL = logging.CRITICAL


@dataclass
class Diagnostic:
    severity: Severity
    message: str
    continuations: List[str] = field(default_factory=list)

    def lines(self) -> List[str]:
        return [f"** {self.severity.name.title():>7} ** {self.message}"] + [
            f"**   ~~~   ** {c}" for c in self.continuations
        ]


class EMPDInputError(RuntimeError):
    """Raised when EMPD input processing found severe errors."""

    def __init__(self, summary: str, diagnostics: Iterable[Diagnostic] = ()):
        super().__init__(summary)
        self.diagnostics = list(diagnostics)


class Diagnostics:
    """Ordered collector of diagnostics, mirrored to :mod:`logging`."""

    def __init__(self) -> None:
        self.records: List[Diagnostic] = []

    def _add(self, severity: Severity, message: str, continuations: Iterable[str]) -> Diagnostic:
        diag = Diagnostic(severity, message, list(continuations))
        self.records.append(diag)
        for line in diag.lines():
            logger.log(int(severity), line)
        return diag

    def info(self, message: str, *continuations: str) -> Diagnostic:
        return self._add(Severity.INFO, message, continuations)

    def warning(self, message: str, *continuations: str) -> Diagnostic:
        return self._add(Severity.WARNING, message, continuations)

    def severe(self, message: str, *continuations: str) -> Diagnostic:
        return self._add(Severity.SEVERE, message, continuations)

    def fatal(self, message: str, *continuations: str) -> Diagnostic:
        return self._add(Severity.FATAL, message, continuations)

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.records if d.severity >= Severity.SEVERE]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.records if d.severity == Severity.WARNING]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def messages(self) -> List[str]:
        out: List[str] = []
        for diag in self.records:
            out.extend(diag.lines())
        return out

    def raise_for_errors(self, summary: str) -> None:
        """Record a fatal entry and raise :class:`EMPDInputError` if any severe errors were collected."""
        if not self.has_errors:
            return
        self.fatal(summary)
        raise EMPDInputError(summary, self.records)
