"""Custom exception hierarchy for the grammar engine."""


class GrammarEngineError(Exception):
    """Base exception for all grammar engine errors."""


class ConfigurationError(GrammarEngineError):
    """Error in system configuration."""


class DetectionFailure(GrammarEngineError):
    """A language detection strategy could not produce a result.

    Always recovered inside the identifier; never reaches a caller.
    """


class ExternalServiceError(GrammarEngineError):
    """The general-purpose grammar service returned a failure."""

    def __init__(self, message: str, status_code: int, details: object = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class ServiceTimeoutError(ExternalServiceError):
    """An external call exceeded its timeout. Handled like any service failure."""

    def __init__(self, message: str = "External service request timed out") -> None:
        super().__init__(message, status_code=408)


class GenerationError(GrammarEngineError):
    """Error calling the generative-suggestion service."""


class SuggestionParseError(GrammarEngineError):
    """A generative-suggestion line did not match the expected grammar."""


class ValidationFailure(GrammarEngineError):
    """A generative suggestion could not be confirmed."""


class AllSourcesExhausted(GrammarEngineError):
    """No annotation source produced a result for the request."""

    def __init__(self, failures: dict[str, BaseException] | None = None) -> None:
        super().__init__("Grammar check failed")
        self.failures = failures or {}
