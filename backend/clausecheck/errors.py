from __future__ import annotations


class ClauseCheckError(Exception):
    """Base exception for the contract analysis backend."""


class InvalidUploadError(ClauseCheckError):
    """The request did not carry exactly one non-empty file."""


class PayloadTooLargeError(ClauseCheckError):
    """The uploaded file exceeded the configured byte ceiling."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"Upload exceeds {limit} bytes")
        self.limit = limit


class ModelResponseError(ClauseCheckError):
    """A language model returned output that does not match the expected shape."""


class StorageError(ClauseCheckError):
    """The object store rejected an operation."""


class PipelineStageError(ClauseCheckError):
    """A pipeline stage failed; the original exception is chained as ``__cause__``."""

    def __init__(self, stage: str) -> None:
        super().__init__(f"Stage '{stage}' failed")
        self.stage = stage
