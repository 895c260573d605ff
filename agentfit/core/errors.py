"""
Exception hierarchy for AgentFit.

TemplateError is a programming error and always surfaces. The other
errors describe a failed completion attempt; they are retried by the
prompt executor and absorbed into fallbacks by the agent runner and
the aggregators.
"""


class AgentFitError(Exception):
    """Base class for all AgentFit errors."""


class TemplateError(AgentFitError):
    """Unknown template id or a required template variable is missing."""


class TransportError(AgentFitError):
    """The completion endpoint could not be reached or answered non-2xx."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CompletionTimeoutError(TransportError):
    """The completion endpoint did not answer within the request timeout."""


class ResponseValidationError(AgentFitError):
    """The reply did not match the shape the prompt declared."""
