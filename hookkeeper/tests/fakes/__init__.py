"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeIdentityPort: Fixed public key
- FakeProbePort: Canned probe responses, recorded URLs
- FakeHookConfigRepository: In-memory configuration persistence
- FakeServerRuntime, FakeJob, FakePushTrigger: Jobs with recorded registrations
- FakeManagementPort: Canned management results for adapter tests
"""

from .identity import FakeIdentityPort
from .management import FakeManagementPort
from .probe import FakeProbePort
from .repository import FakeHookConfigRepository
from .runtime import FakeJob, FakePushTrigger, FakeServerRuntime

__all__ = [
    "FakeHookConfigRepository",
    "FakeIdentityPort",
    "FakeJob",
    "FakeManagementPort",
    "FakeProbePort",
    "FakePushTrigger",
    "FakeServerRuntime",
]
