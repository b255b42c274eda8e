"""Hook URL validator.

Checks that a candidate hook URL is served by this installation by sending a
validation probe and comparing the responder's identity header with our own
public key fingerprint.
"""

import base64
import logging

from .exceptions import (
    IdentityMismatchError,
    NetworkError,
    UnexpectedStatusError,
    UnrecognizedResponderWarning,
)
from .models import ValidationResult
from .ports import IdentityPort, ProbePort

logger = logging.getLogger(__name__)

VALIDATION_PROBE_HEADER = "X-Validation-Probe"
INSTANCE_IDENTITY_HEADER = "X-Instance-Identity"


def identity_fingerprint(public_key_der: bytes) -> str:
    """Return the base64 form of a DER public key, as sent in the identity header."""
    return base64.b64encode(public_key_der).decode("ascii")


class HookUrlValidator:
    """Validates candidate hook URLs against this instance's identity."""

    def __init__(self, identity: IdentityPort, probe: ProbePort):
        """Initialize the validator.

        Args:
            identity: Provider of this installation's public key.
            probe: Adapter that sends the validation probe.
        """
        self.identity = identity
        self.probe = probe
        self._fingerprint: str | None = None

    @property
    def fingerprint(self) -> str:
        if self._fingerprint is None:
            self._fingerprint = identity_fingerprint(self.identity.public_key())
        return self._fingerprint

    async def validate(self, candidate_url: str) -> ValidationResult:
        """Probe a candidate URL and classify the response.

        Never raises for probe failures; every outcome is a ValidationResult.

        Args:
            candidate_url: URL an administrator proposes as the hook URL.

        Returns:
            OK if the URL reaches this instance, WARNING if the responder does
            not identify itself, ERROR otherwise.
        """
        try:
            response = await self.probe.probe(candidate_url)
        except NetworkError as e:
            logger.warning(
                f"Hook URL probe failed for {candidate_url}: {e}",
                extra={"url": candidate_url},
            )
            return ValidationResult.error(
                f"Failed to test a connection to {candidate_url}: {e}",
                reason=NetworkError.reason,
            )

        if response.status_code != 200:
            error = UnexpectedStatusError(response.status_code, candidate_url)
            return ValidationResult.error(str(error), reason=error.reason)

        responder = response.header(INSTANCE_IDENTITY_HEADER)
        if responder is None:
            # someone else's app on this URL is legitimate
            return ValidationResult.warning(
                f"It doesn't look like {candidate_url} is talking to any "
                "hookkeeper instance. Are you running your own app?",
                reason=UnrecognizedResponderWarning.reason,
            )

        if responder.strip() != self.fingerprint:
            error = IdentityMismatchError(candidate_url)
            logger.warning(
                str(error),
                extra={"url": candidate_url},
            )
            return ValidationResult.error(str(error), reason=error.reason)

        logger.debug(f"Hook URL {candidate_url} verified", extra={"url": candidate_url})
        return ValidationResult.ok()
