"""Error taxonomy shared by the profile, summary and recommendation modules.

Every error carries a ``kind`` so the web layer can map it to a status code
while logging keeps the original category.
"""

from __future__ import annotations

from typing import Optional


class CollegeProfileError(Exception):
    kind: str = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(CollegeProfileError):
    """Profile or a matched sub-record is absent."""

    kind = "not_found"


class ValidationError(CollegeProfileError):
    """Missing or malformed caller input."""

    kind = "validation"


class UpstreamError(CollegeProfileError):
    """The AI workflow could not be reached or answered with a failure."""

    kind = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(CollegeProfileError):
    """The AI workflow answered, but not in the expected shape."""

    kind = "parse"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        position: Optional[int] = None,
        snippet: str = "",
    ) -> None:
        details = message
        if field:
            details += f" (field={field!r}"
            if position is not None:
                details += f", position={position}"
            details += ")"
        if snippet:
            details += f". Raw snippet: {snippet}"
        super().__init__(details)
        self.field = field
        self.position = position
        self.snippet = snippet


class PersistenceError(CollegeProfileError):
    kind = "persistence"
