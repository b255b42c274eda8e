"""Core domain logic for the hookkeeper webhook manager.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .models import (
    Credential,
    FailurePolicy,
    HookConfiguration,
    HookMode,
    JobFailure,
    ProbeResponse,
    ReRegistrationReport,
    ValidationResult,
    ValidationStatus,
)

__all__ = [
    "Credential",
    "FailurePolicy",
    "HookConfiguration",
    "HookMode",
    "JobFailure",
    "ProbeResponse",
    "ReRegistrationReport",
    "ValidationResult",
    "ValidationStatus",
]
