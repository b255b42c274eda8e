"""Integration tests for the composition root.

These tests verify configuration loading and validation, and that jobs from
a jobs file are wired to GitHub push triggers that follow the live
configuration.
"""

import json
import os
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from hookkeeper.adapters.runtime.github import GitHubPushTrigger
from hookkeeper.adapters.runtime.registry import JobRegistryRuntime
from hookkeeper.config import Settings, load_settings
from hookkeeper.core.hook_config import HookConfigurationStore
from hookkeeper.core.models import Credential
from hookkeeper.main import load_jobs
from hookkeeper.tests.fakes import FakeHookConfigRepository


def make_settings(**overrides) -> Settings:
    """Settings that ignore any .env file in the working directory."""
    return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]


class TestConfigurationLoading:
    """Test configuration loading and validation."""

    def test_defaults(self) -> None:
        settings = make_settings()
        assert settings.webhook_path == "github-webhook"
        assert settings.allow_hook_url_override is True
        assert settings.reregister_failure_policy == "abort"
        assert settings.run_mode == "server"
        assert settings.log_level == "INFO"

    def test_load_settings_from_env(self) -> None:
        with patch.dict(
            os.environ,
            {
                "ROOT_URL": "https://ci.example.com/",
                "WEBHOOK_PATH": "/hooks/github/",
                "REREGISTER_FAILURE_POLICY": "continue",
                "RUN_MODE": "cli",
            },
        ):
            settings = make_settings()
            assert settings.root_url == "https://ci.example.com/"
            assert settings.webhook_path == "hooks/github"
            assert settings.reregister_failure_policy == "continue"
            assert settings.run_mode == "cli"

    def test_load_settings_from_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ALLOW_HOOK_URL_OVERRIDE=false\nSERVER_PORT=9090\n")

        settings = load_settings(str(env_file))

        assert settings.allow_hook_url_override is False
        assert settings.server_port == 9090

    def test_validates_probe_timeout(self) -> None:
        with pytest.raises(Exception):  # ValidationError
            make_settings(probe_timeout_seconds=0)

    def test_validates_queue_size(self) -> None:
        with pytest.raises(Exception):  # ValidationError
            make_settings(reregister_queue_size=-1)

    def test_validates_server_port(self) -> None:
        with pytest.raises(Exception):  # ValidationError
            make_settings(server_port=70000)

    def test_validates_webhook_path(self) -> None:
        with pytest.raises(Exception):  # ValidationError
            make_settings(webhook_path="///")

    def test_rejects_unknown_failure_policy(self) -> None:
        with pytest.raises(Exception):  # ValidationError
            make_settings(reregister_failure_policy="retry")


class TestLoadJobs:
    """Jobs file wiring."""

    @pytest.mark.asyncio
    async def test_triggers_follow_live_configuration(self, tmp_path: Path) -> None:
        jobs_file = tmp_path / "jobs.json"
        jobs_file.write_text(json.dumps([
            {"name": "web/build", "github_repo": "acme/web"},
            {"name": "docs/publish"},
        ]))
        settings = make_settings(jobs_file=str(jobs_file))
        runtime = JobRegistryRuntime(root_url="https://ci.example.com/")
        store = HookConfigurationStore(FakeHookConfigRepository(), runtime)

        async with httpx.AsyncClient() as client:
            load_jobs(settings, store, client)
            runtime.start()
            trigger = runtime.all_jobs()[0].push_trigger()

            assert isinstance(trigger, GitHubPushTrigger)
            assert trigger.repository == "acme/web"
            assert trigger.hook_url() == "https://ci.example.com/github-webhook/"

            credential = Credential("https://api.github.com", "ci", "t")
            await store.update(True, "https://hooks.example.net/", [credential])

            assert trigger.hook_url() == "https://hooks.example.net/"
            assert trigger.credentials() == (credential,)
        assert runtime.all_jobs()[1].push_trigger() is None

    @pytest.mark.asyncio
    async def test_no_jobs_file_loads_nothing(self) -> None:
        runtime = JobRegistryRuntime()
        store = HookConfigurationStore(FakeHookConfigRepository(), runtime)

        async with httpx.AsyncClient() as client:
            load_jobs(make_settings(), store, client)
        runtime.start()

        assert runtime.all_jobs() == ()
