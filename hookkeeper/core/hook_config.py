"""Hook configuration store.

Holds the single owned HookConfiguration for the process. The configuration
is loaded once at startup and replaced only through update(), which persists
a new immutable snapshot and then swaps it in.
"""

import asyncio
import logging
from collections.abc import Sequence

from .exceptions import ConfigurationError
from .models import Credential, HookConfiguration
from .ports import HookConfigRepositoryPort, ServerRuntimePort

logger = logging.getLogger(__name__)

DEFAULT_WEBHOOK_PATH = "github-webhook"


class HookConfigurationStore:
    """Owner of the hook configuration and its load/save lifecycle."""

    def __init__(
        self,
        repository: HookConfigRepositoryPort,
        runtime: ServerRuntimePort,
        webhook_path: str = DEFAULT_WEBHOOK_PATH,
        allow_override: bool = True,
    ):
        """Initialize the store.

        Args:
            repository: Persistence for the configuration.
            runtime: Server runtime, used for the root URL.
            webhook_path: Path segment of this server's webhook endpoint.
            allow_override: Whether a hook URL override may be configured.
        """
        self.repository = repository
        self.runtime = runtime
        self.webhook_path = webhook_path.strip("/")
        self.allow_override = allow_override
        self._config = HookConfiguration()
        self._update_lock = asyncio.Lock()

    async def load(self) -> HookConfiguration:
        """Load the persisted configuration, keeping defaults if none exists."""
        async with self._update_lock:
            stored = await self.repository.load()
            if stored is not None:
                self._config = stored
        logger.info(
            "Hook configuration loaded",
            extra={
                "mode": self._config.mode.value,
                "has_override": self._config.has_override,
                "credentials": len(self._config.credentials),
            },
        )
        return self._config

    @property
    def snapshot(self) -> HookConfiguration:
        return self._config

    @property
    def manage_hook(self) -> bool:
        return self._config.manage_hook

    @property
    def credentials(self) -> tuple[Credential, ...]:
        return self._config.credentials

    def has_override(self) -> bool:
        return self._config.has_override

    def default_hook_url(self) -> str:
        """Return the hook URL derived from the server's root URL.

        Raises:
            ConfigurationError: If the root URL is unknown.
        """
        root_url = self.runtime.root_url()
        if not root_url:
            raise ConfigurationError(
                "Root URL is not configured and no hook URL override is set"
            )
        if not root_url.endswith("/"):
            root_url += "/"
        return f"{root_url}{self.webhook_path}/"

    def effective_hook_url(self) -> str:
        """Return the override if set, else the derived default URL.

        Raises:
            ConfigurationError: If no override is set and the root URL is unknown.
        """
        config = self._config
        if config.hook_url_override is not None:
            return config.hook_url_override
        return self.default_hook_url()

    async def update(
        self,
        manage_hook: bool,
        hook_url_override: str | None,
        credentials: Sequence[Credential],
    ) -> HookConfiguration:
        """Persist a new configuration, then swap it in for readers.

        Raises:
            ConfigurationError: If an override is given but overrides are disabled.
            Exception: If persistence fails. The previous configuration stays
                in effect.
        """
        new_config = HookConfiguration(
            manage_hook=manage_hook,
            hook_url_override=hook_url_override,
            credentials=tuple(credentials),
        )
        if new_config.has_override and not self.allow_override:
            raise ConfigurationError("Hook URL override is disabled on this server")

        async with self._update_lock:
            # readers keep the old snapshot until the new one is persisted
            try:
                await self.repository.save(new_config)
            except Exception:
                logger.error(
                    "Failed to persist hook configuration, keeping previous configuration",
                    exc_info=True,
                )
                raise
            self._config = new_config

        logger.info(
            "Hook configuration updated",
            extra={
                "mode": new_config.mode.value,
                "has_override": new_config.has_override,
                "credentials": len(new_config.credentials),
            },
        )
        return new_config
