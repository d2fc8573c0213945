"""Errors raised by the log point core and its storage adapters."""

from __future__ import annotations


class LogPointError(Exception):
    """Base class for log point failures."""


class DuplicateLogPointError(LogPointError):
    """A log point already exists for the (workspace, file, line, client) tuple."""

    def __init__(self, file_name: str, line_no: int, client: str) -> None:
        super().__init__(
            f"Log point already exists on file {file_name} at line {line_no} for client {client}"
        )
        self.file_name = file_name
        self.line_no = line_no
        self.client = client


class CorruptFieldError(LogPointError):
    """A stored list column holds text that cannot be decoded."""

    def __init__(self, column: str, raw: str, detail: str) -> None:
        super().__init__(f"Corrupt value in column {column}: {detail}")
        self.column = column
        self.raw = raw
