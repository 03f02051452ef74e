"""Review-suggestion generation exceptions.

Every error raised while generating live suggestions is a ``GenerationError``.
None of them reach the end user: the service layer catches them and serves
fallback suggestions instead.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base exception for suggestion generation errors."""


class UpstreamUnavailable(GenerationError):
    """Raised when the text-generation API cannot serve the request.

    Covers a missing credential, network failures and non-success responses.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UpstreamTimeout(UpstreamUnavailable):
    """Raised when a single upstream request times out."""


class MalformedResponse(GenerationError):
    """Raised when the upstream payload cannot be parsed into suggestions."""


class EmptyResult(GenerationError):
    """Raised when parsing succeeds but no usable suggestion survives filtering."""


class RateLimited(GenerationError):
    """Raised when the local admission-control gate is closed."""


class DuplicateSuggestions(GenerationError):
    """Raised when an attempt produced fewer novel suggestions than requested."""


class FallbackError(GenerationError):
    """Raised by the generator once live generation has given up.

    Callers substitute fallback content. ``reason`` is the error that ended
    the last attempt.
    """

    def __init__(self, reason: GenerationError):
        super().__init__(f"live generation failed: {reason}")
        self.reason = reason

    @property
    def reason_name(self) -> str:
        return type(self.reason).__name__


# Errors worth another attempt within the retry budget.
RETRYABLE_ERRORS: tuple[type[GenerationError], ...] = (
    UpstreamUnavailable,
    MalformedResponse,
    EmptyResult,
    DuplicateSuggestions,
)
