"""Error taxonomy for hook management.

Validation failures (NetworkError, UnexpectedStatusError,
IdentityMismatchError, UnrecognizedResponderWarning) are converted into
ValidationResult values by the validator. PolicyError, ConfigurationError
and RuntimeUnavailableError propagate to the caller.
"""


class HookKeeperError(Exception):
    """Base class for hook management errors."""

    reason = "error"


class ConfigurationError(HookKeeperError):
    """The hook configuration cannot produce the requested value."""

    reason = "configuration_error"


class NetworkError(HookKeeperError):
    """The candidate URL could not be reached."""

    reason = "network_error"


class UnexpectedStatusError(HookKeeperError):
    """The probe received a non-200 response."""

    reason = "unexpected_status"

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Got {status_code} from {url}")


class IdentityMismatchError(HookKeeperError):
    """The candidate URL is served by a different installation."""

    reason = "identity_mismatch"

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"{url} is connecting to a different hookkeeper instance")


class UnrecognizedResponderWarning(UserWarning):
    """The candidate URL answered but does not identify itself."""

    reason = "unrecognized_responder"


class PolicyError(HookKeeperError):
    """Re-registration requested while hooks are managed manually."""

    reason = "policy_error"


class RuntimeUnavailableError(HookKeeperError):
    """The server runtime is not running."""

    reason = "runtime_unavailable"


__all__ = [
    "ConfigurationError",
    "HookKeeperError",
    "IdentityMismatchError",
    "NetworkError",
    "PolicyError",
    "RuntimeUnavailableError",
    "UnexpectedStatusError",
    "UnrecognizedResponderWarning",
]
