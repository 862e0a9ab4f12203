from __future__ import annotations


class PipelineError(Exception):
    """
    Base error for a recognition run.

    Carries the HTTP status code the API should answer with, so the
    failing step decides how it is reflected to the caller.
    """

    status_code = 500

    def __init__(self, reason: str, status_code: int | None = None):
        super().__init__(reason)
        self.reason = reason
        if status_code is not None:
            self.status_code = status_code


class JobAllocationError(PipelineError):
    """Input directory for a job could not be created."""


class FetchError(PipelineError):
    """An image could not be downloaded or written to disk."""


class RecognizerError(PipelineError):
    """The recognition service answered with a non-OK status."""


class RecognizerUnavailable(PipelineError):
    """The recognition service could not be reached."""


class CollectError(PipelineError):
    """The job output directory could not be listed."""
