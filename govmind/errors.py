"""Exception hierarchy for the proposal analysis pipeline."""


class GovmindError(Exception):
    """Base class for all pipeline errors."""


class GatewayError(GovmindError):
    """The completion endpoint failed or returned an unusable envelope.

    Recoverable by retrying the analysis.
    """

    def __init__(self, reason: str, status_code: int | None = None, body: str = ""):
        self.reason = reason
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{reason} (HTTP {status_code}): {body[:200]}"
        elif body:
            message = f"{reason}: {body[:200]}"
        else:
            message = reason
        super().__init__(message)


class ParseError(GovmindError):
    """No JSON object could be located in a model completion.

    Carries the offending text so it can be logged. Recoverable by retrying,
    since it is a property of one completion.
    """

    def __init__(self, message: str, text: str = ""):
        self.text = text
        super().__init__(message)


class ValidationError(GovmindError):
    """The caller supplied missing or blank required input. Not retryable."""


class ConfigurationError(GovmindError):
    """Required settings (such as the API key) are missing."""
