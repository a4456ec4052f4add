"""Errors raised by refimage.

Nothing here is retried or recovered locally: every error is fatal to the
test step that triggered it.
"""

from __future__ import annotations

from typing import Sequence


class RefImageError(Exception):
    pass


class UnknownGravity(RefImageError, ValueError):
    def __init__(self, code: str, known: Sequence[str] = ()) -> None:
        self.code = code
        message = f"Unknown gravity {code!r}"
        if known:
            message += f" (expected one of: {', '.join(known)})"
        super().__init__(message)


class UnhandledAttributes(RefImageError, ValueError):
    def __init__(self, keys: Sequence[str]) -> None:
        self.keys = list(keys)
        super().__init__(f"I haven't dealt with all the parameters ({', '.join(self.keys)})")


class ExternalToolFailure(RefImageError, RuntimeError):
    def __init__(self, argv: Sequence[str], message: str, returncode: int | None = None, output: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.output = output
        detail = message
        if output.strip():
            detail = f"{message}. Output:\n{output.strip()}"
        super().__init__(detail)


class ComparisonPending(RefImageError):
    """The response image comparison is switched off."""


class NoCapturedResponse(RefImageError, LookupError):
    pass


class ImageMismatch(RefImageError, AssertionError):
    pass
