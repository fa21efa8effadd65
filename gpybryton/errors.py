"""Errors raised while converting GPX files to Bryton navigation files."""

from __future__ import annotations
from typing import Any, Dict, List, Optional


class BrytonError(Exception):
    """Base error for GPX to Bryton conversion."""
    code = "BRYTON_ERROR"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ParseFailure(BrytonError):
    """Input file is unreadable or malformed. Nothing has been written."""
    code = "PARSE_FAILURE"


class IOFailure(BrytonError):
    """One or more output files could not be stored."""
    code = "IO_FAILURE"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None,
                 written: Optional[List[str]] = None):
        super().__init__(message, details=details)
        self.written = written or []
