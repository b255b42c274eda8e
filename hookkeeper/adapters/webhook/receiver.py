"""Request handling for the admin API and the GitHub webhook endpoint.

Translates HTTP-level requests into HookManagementPort calls and turns the
results into JSON-ready dictionaries. Also answers validation probes on the
webhook endpoint with this instance's identity fingerprint.
"""

import logging
from typing import Any

from hookkeeper.core.exceptions import ConfigurationError, PolicyError
from hookkeeper.core.models import Credential, HookMode
from hookkeeper.core.ports import HookManagementPort
from hookkeeper.core.validator import INSTANCE_IDENTITY_HEADER

logger = logging.getLogger(__name__)


def parse_hook_mode(value: Any) -> bool:
    """Map the form's "auto"/"manual" mode to manage_hook.

    Raises:
        ValueError: If the mode is not recognized.
    """
    if isinstance(value, dict):
        value = value.get("value")
    try:
        return HookMode(str(value).lower()) is HookMode.AUTO
    except ValueError as e:
        raise ValueError(f"Invalid hook mode: {value!r} (expected 'auto' or 'manual')") from e


class WebhookReceiver:
    """Handles admin requests and incoming webhook deliveries."""

    def __init__(self, management_port: HookManagementPort, identity_fingerprint: str):
        """Initialize the receiver.

        Args:
            management_port: HookManagementPort implementation.
            identity_fingerprint: Base64 DER public key announced to probes.
        """
        self.management_port = management_port
        self.identity_fingerprint = identity_fingerprint

    async def handle_check_hook_url(self, value: str) -> dict[str, Any]:
        """Check a candidate hook URL.

        Returns:
            Dictionary with status (ok, warning, error), message and reason.
        """
        result = await self.management_port.check_hook_url(value)
        return {"operation": "check_hook_url", "url": value, **result.to_dict()}

    async def handle_configure(self, data: dict[str, Any]) -> dict[str, Any]:
        """Apply a configuration submitted as {mode, hookUrl, credentials}.

        Returns:
            Dictionary with the validation outcome and whether it was applied.

        Raises:
            ValueError: If the mode, hook URL or credentials are malformed.
        """
        manage_hook = parse_hook_mode(data.get("mode", HookMode.AUTO.value))
        hook_url = data.get("hookUrl") or data.get("hook_url")
        if hook_url is not None and not isinstance(hook_url, str):
            raise ValueError("hookUrl must be a string")
        raw_credentials = data.get("credentials") or []
        if not isinstance(raw_credentials, list):
            raise ValueError("credentials must be a list")
        if not all(isinstance(item, dict) for item in raw_credentials):
            raise ValueError("each credential must be an object")
        credentials = [Credential.from_dict(item) for item in raw_credentials]

        try:
            result = await self.management_port.configure(
                manage_hook, hook_url, credentials
            )
        except ConfigurationError as e:
            return {
                "operation": "configure",
                "status": "error",
                "message": str(e),
                "reason": e.reason,
                "applied": False,
            }

        logger.info(
            "Configuration submitted via admin API",
            extra={"status": result.status.value, "manage_hook": manage_hook},
        )
        return {
            "operation": "configure",
            **result.to_dict(),
            "applied": not result.is_error,
        }

    async def handle_re_register(self) -> dict[str, Any]:
        """Re-register hooks for all jobs.

        Returns:
            Dictionary with status (ok, error), message and jobsTriggered.
        """
        try:
            report = await self.management_port.re_register_all()
        except PolicyError as e:
            return {"status": "error", "message": str(e), "jobsTriggered": 0}
        except Exception as e:
            logger.error(f"Re-registration failed: {e}", exc_info=True)
            return {
                "status": "error",
                "message": f"Re-registration failed: {e}",
                "jobsTriggered": 0,
            }

        return {
            "status": "ok" if not report.failures else "error",
            "message": f"Called re-register hooks for {report.jobs_triggered} jobs",
            "jobsTriggered": report.jobs_triggered,
            "failures": [
                {"job": f.job_name, "error": f.error} for f in report.failures
            ],
        }

    async def handle_get_configuration(self) -> dict[str, Any]:
        """Return the current configuration with tokens redacted."""
        config = self.management_port.get_configuration()
        try:
            effective: str | None = self.management_port.effective_hook_url()
        except ConfigurationError:
            effective = None
        return {
            "status": "ok",
            "mode": config.mode.value,
            "hookUrl": config.hook_url_override,
            "effectiveHookUrl": effective,
            "credentials": [c.to_dict(redact=True) for c in config.credentials],
        }

    def handle_validation_probe(self) -> dict[str, str]:
        """Headers answering a validation probe on the webhook endpoint."""
        return {INSTANCE_IDENTITY_HEADER: self.identity_fingerprint}

    def handle_webhook_event(self, event_type: str | None, body: bytes) -> dict[str, Any]:
        """Acknowledge a webhook delivery.

        The payload is not interpreted here.
        """
        logger.info(
            f"Received GitHub webhook event: {event_type or 'unknown'}",
            extra={"event_type": event_type, "size": len(body)},
        )
        return {"status": "accepted", "event": event_type}
