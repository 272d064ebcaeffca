"""Exception hierarchy shared by providers, stores, agents and the HTTP layer."""

from __future__ import annotations

from datetime import datetime, timezone


class VerdantError(Exception):
    """Base class for every error raised on purpose by this package."""

    code = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {
            "type": self.code,
            "message": self.message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class ConfigurationError(VerdantError):
    """Missing credentials or environment. Never retried."""

    code = "configuration_error"


class InvalidParameter(VerdantError):
    """Bad input shape or range; the caller has to fix the request."""

    code = "invalid_parameter"


class ProviderError(VerdantError):
    """A generative API answered with a non-2xx status or a malformed body."""

    code = "provider_error"

    def __init__(self, provider: str, status: int | None, raw_message: str) -> None:
        self.provider = provider
        self.status = status
        self.raw_message = raw_message
        status_text = f" ({status})" if status is not None else ""
        super().__init__(f"{provider} API error{status_text}: {raw_message}")

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["provider"] = self.provider
        data["status"] = self.status
        return data


class ProviderTimeout(ProviderError):
    code = "provider_timeout"

    def __init__(self, provider: str, timeout: float) -> None:
        super().__init__(provider, None, f"no response within {timeout:g}s")


class NotFound(VerdantError):
    code = "not_found"


class AgentNotFound(NotFound):
    code = "agent_not_found"


class ContentNotFound(NotFound):
    code = "content_not_found"


class WorkflowNotFound(NotFound):
    code = "workflow_not_found"


class ProgramNotFound(NotFound):
    code = "program_not_found"


class InvalidStateTransition(VerdantError):
    """An approval decision was applied to a workflow that is already terminal."""

    code = "invalid_state_transition"


class StoreError(VerdantError):
    """The backing store rejected a read or write, or could not be reached."""

    code = "store_error"


class ContentGenerationFailed(VerdantError):
    code = "content_generation_failed"

    def __init__(self, message: str, cause: ProviderError | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class NoNichesConfigured(VerdantError):
    code = "no_niches_configured"
