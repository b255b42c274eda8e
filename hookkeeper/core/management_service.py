"""Management service: implements HookManagementPort for administrator actions.

Coordinates the configuration store, the URL validator and the
re-registration coordinator. A proposed hook URL override is always
validated before it is stored.
"""

import logging
from collections.abc import Sequence

from .hook_config import HookConfigurationStore
from .models import Credential, HookConfiguration, ReRegistrationReport, ValidationResult
from .ports import HookManagementPort
from .reregistration import ReRegistrationCoordinator
from .validator import HookUrlValidator

logger = logging.getLogger(__name__)


class HookManagementService(HookManagementPort):
    """Core implementation of HookManagementPort."""

    def __init__(
        self,
        config_store: HookConfigurationStore,
        validator: HookUrlValidator,
        coordinator: ReRegistrationCoordinator,
    ):
        """Initialize the management service.

        Args:
            config_store: Owner of the hook configuration.
            validator: Validator for candidate hook URLs.
            coordinator: Coordinator for re-registration passes.
        """
        self.config_store = config_store
        self.validator = validator
        self.coordinator = coordinator

    def get_configuration(self) -> HookConfiguration:
        return self.config_store.snapshot

    def effective_hook_url(self) -> str:
        return self.config_store.effective_hook_url()

    async def check_hook_url(self, url: str) -> ValidationResult:
        """Validate a candidate URL without changing anything."""
        result = await self.validator.validate(url)
        logger.info(
            f"Checked hook URL {url}: {result.status.value}",
            extra={"url": url, "status": result.status.value, "reason": result.reason},
        )
        return result

    async def configure(
        self,
        manage_hook: bool,
        hook_url: str | None,
        credentials: Sequence[Credential],
    ) -> ValidationResult:
        """Validate a proposed override, then apply the whole configuration.

        An ERROR result leaves the stored configuration untouched. A WARNING
        result is returned after the update so the administrator still sees it.

        Raises:
            ConfigurationError: If overrides are disabled and one was given.
            Exception: If persistence fails.
        """
        if hook_url is not None and not hook_url.strip():
            hook_url = None

        result = ValidationResult.ok()
        if hook_url is not None:
            result = await self.validator.validate(hook_url)
            if result.is_error:
                logger.warning(
                    f"Rejected hook URL override {hook_url}: {result.message}",
                    extra={"url": hook_url, "reason": result.reason},
                )
                return result

        await self.config_store.update(manage_hook, hook_url, credentials)
        return result

    async def re_register_all(self) -> ReRegistrationReport:
        return await self.coordinator.re_register_all()
