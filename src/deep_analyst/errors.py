"""Exceptions raised by Deep Analyst."""


class DeepAnalystError(Exception):
    """Base class for all application errors."""


class ConfigurationError(DeepAnalystError):
    """Required configuration (e.g. the API key) is missing."""


class GeminiAPIError(DeepAnalystError):
    """The Gemini endpoint answered with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code


class RateLimitError(DeepAnalystError):
    """Rate-limit or quota failure, normalised to a single message."""

    MESSAGE = "429: API rate limit exceeded."

    def __init__(self, message: str = MESSAGE) -> None:
        super().__init__(message)


class SearchInProgressError(DeepAnalystError):
    pass


class ReportNotFoundError(DeepAnalystError):
    def __init__(self, report_id: str) -> None:
        super().__init__(f"Unknown report id: {report_id}")
        self.report_id = report_id
