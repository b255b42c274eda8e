"""Port interfaces for the hookkeeper webhook manager.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - IdentityPort: This installation's public key
   - ServerRuntimePort: Root URL and the jobs known to the server
   - Job / PushTrigger: Per-job hook registration collaborators
   - HookConfigRepositoryPort: Load and save the hook configuration
   - ProbePort: Send a validation probe to a candidate URL

2. **Driving Ports** (adapters/external systems call into core)
   - HookManagementPort: Administrator actions (check, configure, re-register)
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from .models import (
    Credential,
    HookConfiguration,
    ProbeResponse,
    ReRegistrationReport,
    ValidationResult,
)


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class IdentityPort(ABC):
    """Port for the per-installation asymmetric identity key.

    The key is immutable for the process lifetime, so implementations may
    load it once and share it across threads without locking.
    """

    @abstractmethod
    def public_key(self) -> bytes:
        """Return the public key, DER-encoded (SubjectPublicKeyInfo).

        Returns:
            DER bytes of the public key.
        """


class PushTrigger(ABC):
    """Port for a job's push-trigger capability."""

    @abstractmethod
    async def register_hooks(self) -> None:
        """Register (or refresh) the webhook this trigger depends on.

        How registration happens is up to the implementation.

        Raises:
            Exception: Implementation-defined registration failures.
        """


class Job(ABC):
    """Port for a job known to the server runtime."""

    @property
    @abstractmethod
    def full_name(self) -> str:
        """Fully qualified job name, used in logs and failure reports."""

    @abstractmethod
    def is_buildable(self) -> bool:
        """Return False for disabled jobs."""

    @abstractmethod
    def push_trigger(self) -> PushTrigger | None:
        """Return the job's push trigger, or None if it has none."""


class ServerRuntimePort(ABC):
    """Port for the build server runtime."""

    @abstractmethod
    def root_url(self) -> str | None:
        """Return the server's externally visible root URL, if known.

        Raises:
            RuntimeUnavailableError: If the runtime is not running.
        """

    @abstractmethod
    def all_jobs(self) -> Sequence[Job]:
        """Return every job known to the server.

        Raises:
            RuntimeUnavailableError: If the runtime is not running.
        """


class HookConfigRepositoryPort(ABC):
    """Port for persisting the hook configuration."""

    @abstractmethod
    async def load(self) -> HookConfiguration | None:
        """Load the persisted configuration.

        Returns:
            The stored configuration, or None if nothing has been saved yet.

        Raises:
            Exception: If the backing store is unavailable.
        """

    @abstractmethod
    async def save(self, config: HookConfiguration) -> None:
        """Persist the configuration, replacing any previous one.

        Raises:
            Exception: If the backing store is unavailable.
        """


class ProbePort(ABC):
    """Port for sending validation probes to candidate hook URLs."""

    @abstractmethod
    async def probe(self, url: str) -> ProbeResponse:
        """POST a validation probe to the URL.

        Implementations must mark the request as a probe so the receiver can
        short-circuit, and must bound the request with a timeout.

        Args:
            url: Candidate hook URL.

        Returns:
            The response status code and headers.

        Raises:
            NetworkError: If the URL is malformed, unreachable or times out.
        """


# ============================================================================
# DRIVING PORTS (External systems call into core)
# ============================================================================


class HookManagementPort(ABC):
    """Port for administrator-initiated hook management."""

    @abstractmethod
    def get_configuration(self) -> HookConfiguration:
        """Return the current configuration snapshot."""

    @abstractmethod
    def effective_hook_url(self) -> str:
        """Return the URL GitHub should post to.

        Raises:
            ConfigurationError: If neither an override nor a root URL is known.
        """

    @abstractmethod
    async def check_hook_url(self, url: str) -> ValidationResult:
        """Check that a candidate URL routes back to this installation."""

    @abstractmethod
    async def configure(
        self,
        manage_hook: bool,
        hook_url: str | None,
        credentials: Sequence[Credential],
    ) -> ValidationResult:
        """Validate and apply a new configuration.

        Returns:
            The validation result. An ERROR result means nothing was changed.
        """

    @abstractmethod
    async def re_register_all(self) -> ReRegistrationReport:
        """Re-register hooks for every buildable job with a push trigger.

        Raises:
            PolicyError: If hooks are managed manually.
            RuntimeUnavailableError: If the server runtime is not running.
        """
