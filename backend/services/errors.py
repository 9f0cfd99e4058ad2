"""Exception taxonomy for the matching engine.

Messages carry their category keyword (validation, processing, timeout,
model) so that message-based classification stays consistent.
"""


class MatchingError(Exception):
    """Base class for all matching errors."""

    error_type = "unknown"


class InputValidationError(MatchingError):
    error_type = "validation"

    def __init__(self, message: str):
        super().__init__(f"Input validation failed: {message}")


class ExtractionError(MatchingError):
    """A feature extractor (LLM) call failed after retries."""

    error_type = "model"

    def __init__(self, operation: str, cause: Exception | None = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Extraction model call '{operation}' failed{detail}")


class ExtractorTimeoutError(MatchingError):
    error_type = "timeout"

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"Extraction '{operation}' timeout after {timeout:.1f}s")


class EmbeddingError(MatchingError):
    error_type = "model"

    def __init__(self, message: str):
        super().__init__(f"Embedding model error: {message}")


class ScoringError(MatchingError):
    error_type = "processing"

    def __init__(self, message: str):
        super().__init__(f"Score processing failed: {message}")


class LLMParseError(MatchingError):
    """Raw LLM output could not be validated against the expected schema."""

    error_type = "validation"

    def __init__(self, message: str, raw: str = ""):
        self.raw = raw
        super().__init__(f"LLM output validation failed: {message}")
