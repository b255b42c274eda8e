"""Domain models for the hookkeeper webhook manager.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


class HookMode(Enum):
    """How webhooks are managed for this installation.

    - AUTO: the server registers hooks on GitHub itself
    - MANUAL: an administrator maintains hooks by hand
    """

    AUTO = "auto"
    MANUAL = "manual"

    @classmethod
    def from_manage_hook(cls, manage_hook: bool) -> "HookMode":
        return cls.AUTO if manage_hook else cls.MANUAL


@dataclass(frozen=True)
class Credential:
    """Stored GitHub credential for one API endpoint."""

    api_url: str
    username: str
    oauth_access_token: str = field(repr=False, default="")

    def __post_init__(self) -> None:
        """Validate credential invariants on creation."""
        if not self.api_url or not self.api_url.strip():
            raise ValueError("api_url must be a non-empty string")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Credential":
        """Build a credential from its form or JSON representation.

        Accepts both snake_case and the camelCase keys used by the admin form.
        """
        return cls(
            api_url=str(data.get("api_url") or data.get("apiUrl") or ""),
            username=str(data.get("username") or ""),
            oauth_access_token=str(
                data.get("oauth_access_token") or data.get("oauthAccessToken") or ""
            ),
        )

    def to_dict(self, redact: bool = False) -> dict[str, str]:
        token = self.oauth_access_token
        if redact and token:
            token = "****"
        return {
            "api_url": self.api_url,
            "username": self.username,
            "oauth_access_token": token,
        }


@dataclass(frozen=True)
class HookConfiguration:
    """Immutable snapshot of the webhook configuration.

    The configuration store swaps whole snapshots, so a reader holding one
    always sees a consistent combination of all three fields.
    """

    manage_hook: bool = True
    hook_url_override: str | None = None
    credentials: tuple[Credential, ...] = ()

    def __post_init__(self) -> None:
        """Normalize blank overrides and list credentials."""
        if self.hook_url_override is not None and not self.hook_url_override.strip():
            object.__setattr__(self, "hook_url_override", None)
        if not isinstance(self.credentials, tuple):
            object.__setattr__(self, "credentials", tuple(self.credentials))

    @property
    def mode(self) -> HookMode:
        return HookMode.from_manage_hook(self.manage_hook)

    @property
    def has_override(self) -> bool:
        return self.hook_url_override is not None


class ValidationStatus(Enum):
    """Severity of a hook URL check."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a candidate hook URL.

    Returned to the caller instead of raised, so the admin surface can
    render error, warning and success differently.
    """

    status: ValidationStatus
    message: str = ""
    reason: str | None = None

    @classmethod
    def ok(cls, message: str = "") -> "ValidationResult":
        return cls(ValidationStatus.OK, message)

    @classmethod
    def warning(cls, message: str, reason: str | None = None) -> "ValidationResult":
        return cls(ValidationStatus.WARNING, message, reason)

    @classmethod
    def error(cls, message: str, reason: str | None = None) -> "ValidationResult":
        return cls(ValidationStatus.ERROR, message, reason)

    @property
    def is_ok(self) -> bool:
        return self.status is ValidationStatus.OK

    @property
    def is_warning(self) -> bool:
        return self.status is ValidationStatus.WARNING

    @property
    def is_error(self) -> bool:
        return self.status is ValidationStatus.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class ProbeResponse:
    """Status and headers returned by a validation probe."""

    status_code: int
    headers: Mapping[str, str] | MappingProxyType[str, str] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        """Store headers with lowercase names behind a read-only proxy."""
        lowered = {k.lower(): v for k, v in self.headers.items()}
        object.__setattr__(self, "headers", MappingProxyType(lowered))

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())


class FailurePolicy(Enum):
    """What a re-registration pass does when one job's registration fails.

    - ABORT: the first failure propagates and the remaining jobs are skipped
    - CONTINUE: failures are collected and iteration carries on
    """

    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True)
class JobFailure:
    """A job whose hook registration raised during a CONTINUE pass."""

    job_name: str
    error: str


@dataclass(frozen=True)
class ReRegistrationReport:
    """Result of one re-registration pass."""

    jobs_triggered: int
    failures: tuple[JobFailure, ...] = ()

    def __post_init__(self) -> None:
        """Validate report invariants on creation."""
        if self.jobs_triggered < 0:
            raise ValueError(
                f"jobs_triggered must be non-negative, got {self.jobs_triggered}"
            )
        if len(self.failures) > self.jobs_triggered:
            raise ValueError("failures cannot exceed jobs_triggered")

    @property
    def succeeded(self) -> int:
        return self.jobs_triggered - len(self.failures)
