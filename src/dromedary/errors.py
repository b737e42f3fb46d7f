from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    RENDER_FAILED = "RENDER_FAILED"
    INVALID_INPUT = "INVALID_INPUT"


class DromedaryError(Exception):
    """Raised by handlers and collaborators for all expected failure conditions.

    Caught by server.py and mapped onto an HTTP response (404 page for
    DOCUMENT_NOT_FOUND and INVALID_INPUT, JSON error envelope otherwise).
    Business logic lets it propagate; a failed render is reported once.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str = "",
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


def not_found(identifier: str) -> DromedaryError:
    return DromedaryError(
        code=ErrorCode.DOCUMENT_NOT_FOUND,
        message=f"Document not found: {identifier}",
        suggestion="Check the path; documents live under the posts root as <id>.md or <id>.redirect.",
    )
