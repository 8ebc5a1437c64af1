"""
Error taxonomy shared by the extraction pipeline and the digest composer.
"""


class PipelineError(Exception):
    """Base class for every error raised by pipeline components."""


class ExtractionError(PipelineError):
    """A strategy could not produce usable content."""


class NetworkError(ExtractionError):
    """Fetch failed, timed out, or returned a non-2xx status."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class StructuralError(ExtractionError):
    """A collaborator answered with an unexpected response shape."""


class ContentTooShortError(ExtractionError):
    """The strategy ran but the body text is below its minimum length."""


class ConfigurationError(ExtractionError):
    """A credential required by a component is missing."""


class CompletionTimeoutError(PipelineError):
    """The completion service did not answer within its timeout."""


class CompletionServiceError(NetworkError):
    """The completion service answered with a non-2xx status."""


class JSONExtractionError(PipelineError):
    """No JSON object could be recovered from completion text."""


class ArticleNotFoundError(PipelineError):
    """No stored article has the requested id."""
