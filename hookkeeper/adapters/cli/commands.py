"""CLI command implementations for hook management.

Maps CLI commands (check, configure, reregister, show) to HookManagementPort
operations and handles CLI-specific formatting and error reporting.
"""

import logging
from typing import Any

from hookkeeper.core.exceptions import ConfigurationError, HookKeeperError
from hookkeeper.core.models import Credential
from hookkeeper.core.ports import HookManagementPort

logger = logging.getLogger(__name__)


class CLICommandHandler:
    """Handles CLI commands by delegating to HookManagementPort."""

    def __init__(self, management: HookManagementPort):
        """Initialize the CLI command handler.

        Args:
            management: HookManagementPort implementation to execute commands.
        """
        self.management = management

    async def check_hook_url(self, url: str) -> dict[str, Any]:
        """Check a candidate hook URL via CLI."""
        result = await self.management.check_hook_url(url)
        return {"operation": "check", "url": url, **result.to_dict()}

    async def configure(
        self,
        mode: str,
        hook_url: str | None = None,
        credentials: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Apply a new configuration via CLI.

        Args:
            mode: "auto" or "manual".
            hook_url: Optional hook URL override.
            credentials: Credentials as dictionaries.

        Returns:
            Dictionary with status, message and whether it was applied.

        Raises:
            ValueError: If the mode, hook URL or credentials are malformed.
        """
        mode = mode.lower()
        if mode not in ("auto", "manual"):
            raise ValueError(f"Invalid mode: {mode}. Use 'auto' or 'manual'.")

        if hook_url is not None and not isinstance(hook_url, str):
            raise ValueError("hook_url must be a string")
        if not all(isinstance(c, dict) for c in credentials or []):
            raise ValueError("each credential must be an object")
        parsed = [Credential.from_dict(c) for c in credentials or []]
        try:
            result = await self.management.configure(mode == "auto", hook_url, parsed)
        except ConfigurationError as e:
            return {
                "status": "error",
                "operation": "configure",
                "message": str(e),
                "applied": False,
            }

        return {
            "operation": "configure",
            **result.to_dict(),
            "applied": not result.is_error,
        }

    async def re_register(self) -> dict[str, Any]:
        """Re-register hooks for all jobs via CLI."""
        try:
            report = await self.management.re_register_all()
        except HookKeeperError as e:
            return {"status": "error", "operation": "reregister", "message": str(e)}

        return {
            "status": "ok" if not report.failures else "error",
            "operation": "reregister",
            "message": f"Called re-register hooks for {report.jobs_triggered} jobs",
            "jobs_triggered": report.jobs_triggered,
            "failures": [
                {"job": f.job_name, "error": f.error} for f in report.failures
            ],
        }

    async def show_configuration(self, output_format: str = "json") -> dict[str, Any]:
        """Show the current configuration.

        Args:
            output_format: "json" or "text".

        Raises:
            ValueError: If output_format is not recognized.
        """
        if output_format not in ("json", "text"):
            raise ValueError(f"Invalid format: {output_format}. Use 'json' or 'text'.")

        config = self.management.get_configuration()
        try:
            effective = self.management.effective_hook_url()
        except ConfigurationError as e:
            effective = None
            logger.warning(f"No effective hook URL: {e}")

        data = {
            "mode": config.mode.value,
            "hook_url_override": config.hook_url_override,
            "effective_hook_url": effective,
            "credentials": [c.to_dict(redact=True) for c in config.credentials],
        }

        if output_format == "text":
            lines = [
                f"Mode: {data['mode']}",
                f"Hook URL override: {data['hook_url_override'] or '(none)'}",
                f"Effective hook URL: {effective or '(unknown)'}",
                f"Credentials: {len(config.credentials)}",
            ]
            for c in config.credentials:
                lines.append(f"  - {c.username or '(anonymous)'} @ {c.api_url}")
            return {"status": "success", "operation": "show", "data": "\n".join(lines)}

        return {"status": "success", "operation": "show", "data": data}
