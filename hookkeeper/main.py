"""Composition root for the hookkeeper webhook manager.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Entry point selection (server or interactive CLI)
"""

import asyncio
import json
import logging
import sys
from typing import Any

import httpx

from hookkeeper.adapters.cli.commands import CLICommandHandler
from hookkeeper.adapters.identity.file_key import FileInstanceIdentity
from hookkeeper.adapters.probe.http_probe import HttpxProbe
from hookkeeper.adapters.runtime.github import GitHubPushTrigger
from hookkeeper.adapters.runtime.registry import JobRegistryRuntime
from hookkeeper.adapters.store.sqlite import SQLiteHookConfigRepository
from hookkeeper.adapters.webhook.http_server import WebhookHTTPServer
from hookkeeper.adapters.webhook.receiver import WebhookReceiver
from hookkeeper.config import Settings, load_settings
from hookkeeper.core.hook_config import HookConfigurationStore
from hookkeeper.core.management_service import HookManagementService
from hookkeeper.core.models import FailurePolicy
from hookkeeper.core.queue import SequentialExecutionQueue
from hookkeeper.core.reregistration import ReRegistrationCoordinator
from hookkeeper.core.validator import HookUrlValidator, identity_fingerprint


async def _run_cli_interactive(cli_handler: CLICommandHandler) -> None:
    """Run interactive CLI loop.

    Provides a REPL-like interface for management commands.

    Args:
        cli_handler: CLICommandHandler instance for executing commands.
    """
    logger = logging.getLogger(__name__)
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    loop = asyncio.get_running_loop()

    while True:
        try:
            command_line = await loop.run_in_executor(None, input, "hookkeeper> ")
            command_line = command_line.strip()

            if not command_line:
                continue

            if command_line.lower() == "exit":
                logger.info("Exiting CLI")
                break

            if command_line.lower() == "help":
                _print_cli_help()
                continue

            parts = command_line.split(maxsplit=1)
            command = parts[0].lower()
            args_str = parts[1] if len(parts) > 1 else ""

            try:
                args = json.loads(args_str) if args_str else {}
            except json.JSONDecodeError:
                logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
                continue

            try:
                result = await _execute_cli_command(cli_handler, command, args)
                print(json.dumps(result, indent=2, default=str))
            except Exception as e:
                logger.error(f"Command execution error: {e}", exc_info=True)
                print(json.dumps({"status": "error", "message": str(e)}, indent=2))

        except EOFError:
            logger.info("EOF received, exiting CLI")
            break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            continue


async def _execute_cli_command(
    cli_handler: CLICommandHandler,
    command: str,
    args: dict[str, Any],
) -> dict[str, Any]:
    """Execute a CLI command.

    Raises:
        ValueError: If command is not recognized or arguments are missing.
    """
    if command == "check":
        if "url" not in args:
            raise ValueError("Missing required parameter: url")
        return await cli_handler.check_hook_url(args["url"])

    elif command == "configure":
        if "mode" not in args:
            raise ValueError("Missing required parameter: mode")
        return await cli_handler.configure(
            mode=args["mode"],
            hook_url=args.get("hook_url"),
            credentials=args.get("credentials"),
        )

    elif command == "reregister":
        return await cli_handler.re_register()

    elif command == "show":
        return await cli_handler.show_configuration(
            output_format=args.get("format", "json"),
        )

    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  check
    Check that a candidate hook URL reaches this server.
    Required: url

    Example: check {"url": "https://ci.example.com/github-webhook/"}

  configure
    Replace the hook configuration. A hook_url override is checked first.
    Required: mode ("auto" or "manual")
    Optional: hook_url, credentials

    Example: configure {"mode": "auto", "credentials": [{"api_url": "https://api.github.com", "username": "ci", "oauth_access_token": "..."}]}

  reregister
    Re-register hooks for every buildable job with a push trigger.

  show
    Show the current configuration.
    Optional: format ("json" or "text")

  help
    Show this help message.

  exit
    Exit the CLI.
    """
    print(help_text)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}'
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def load_jobs(
    settings: Settings,
    store: HookConfigurationStore,
    github_client: httpx.AsyncClient,
) -> None:
    """Load jobs from the jobs file into the store's runtime."""
    runtime = store.runtime
    if not isinstance(runtime, JobRegistryRuntime) or not settings.jobs_file:
        return

    def make_trigger(repository: str) -> GitHubPushTrigger:
        return GitHubPushTrigger(
            repository=repository,
            hook_url=store.effective_hook_url,
            credentials=lambda: store.credentials,
            api_base_url=settings.github_api_url,
            client=github_client,
        )

    runtime.load_jobs_file(settings.jobs_file, make_trigger)


async def bootstrap() -> None:
    """Load configuration, wire adapters, and start the application.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters with configuration
    4. Initialize core services
    5. Select and start run mode
    """
    settings = load_settings()

    configure_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
    logger = logging.getLogger(__name__)
    logger.info("Loading hookkeeper...")

    # Adapters
    identity = FileInstanceIdentity(settings.identity_key_path)
    fingerprint = identity_fingerprint(identity.public_key())
    probe = HttpxProbe(timeout_seconds=settings.probe_timeout_seconds)
    repository = SQLiteHookConfigRepository(settings.config_db_path)
    runtime = JobRegistryRuntime(root_url=settings.root_url or None)
    github_client = httpx.AsyncClient(base_url=settings.github_api_url.rstrip("/"))

    # Core services
    config_store = HookConfigurationStore(
        repository=repository,
        runtime=runtime,
        webhook_path=settings.webhook_path,
        allow_override=settings.allow_hook_url_override,
    )
    await config_store.load()
    load_jobs(settings, config_store, github_client)
    runtime.start()

    validator = HookUrlValidator(identity=identity, probe=probe)
    coordinator = ReRegistrationCoordinator(
        config_store=config_store,
        runtime=runtime,
        queue=SequentialExecutionQueue(
            name="re-register", maxsize=settings.reregister_queue_size
        ),
        failure_policy=FailurePolicy(settings.reregister_failure_policy),
    )
    management_service = HookManagementService(
        config_store=config_store,
        validator=validator,
        coordinator=coordinator,
    )

    logger.info(f"Starting in {settings.run_mode} mode...")

    try:
        if settings.run_mode == "server":
            receiver = WebhookReceiver(
                management_port=management_service,
                identity_fingerprint=fingerprint,
            )
            http_server = WebhookHTTPServer(
                webhook_receiver=receiver,
                host=settings.server_host,
                port=settings.server_port,
                webhook_path=settings.webhook_path,
                api_key=settings.admin_api_key or None,
                require_auth=settings.admin_require_auth,
            )
            await http_server.start()
            try:
                while True:
                    await asyncio.sleep(1)
            finally:
                await http_server.stop()

        elif settings.run_mode == "cli":
            cli_handler = CLICommandHandler(management_service)
            await _run_cli_interactive(cli_handler)

        else:
            logger.error(f"Unknown run mode: {settings.run_mode}")
            sys.exit(1)

    finally:
        runtime.stop()
        await coordinator.close()
        await probe.close()
        await github_client.aclose()


def main() -> None:
    """Application entry point.

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    logger = logging.getLogger(__name__)
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
