"""Tests for the in-process job registry runtime."""

import json
from pathlib import Path

import pytest

from hookkeeper.adapters.runtime.registry import JobRegistryRuntime, RegisteredJob
from hookkeeper.core.exceptions import RuntimeUnavailableError
from hookkeeper.tests.fakes import FakePushTrigger


class TestLifecycle:
    def test_not_running_until_started(self) -> None:
        runtime = JobRegistryRuntime(root_url="https://ci.example.com/")

        with pytest.raises(RuntimeUnavailableError):
            runtime.root_url()
        with pytest.raises(RuntimeUnavailableError):
            runtime.all_jobs()

    def test_started_runtime_exposes_root_url_and_jobs(self) -> None:
        runtime = JobRegistryRuntime(root_url="https://ci.example.com/")
        runtime.add_job(RegisteredJob("app/build"))
        runtime.start()

        assert runtime.root_url() == "https://ci.example.com/"
        assert [job.full_name for job in runtime.all_jobs()] == ["app/build"]

    def test_blank_root_url_is_none(self) -> None:
        runtime = JobRegistryRuntime(root_url="")
        runtime.start()
        assert runtime.root_url() is None

    def test_stopped_runtime_is_unavailable(self) -> None:
        runtime = JobRegistryRuntime()
        runtime.start()
        runtime.stop()

        with pytest.raises(RuntimeUnavailableError):
            runtime.all_jobs()


class TestRegisteredJob:
    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            RegisteredJob(" ")

    def test_exposes_trigger_and_buildable(self) -> None:
        trigger = FakePushTrigger()
        job = RegisteredJob("app/build", buildable=False, trigger=trigger)

        assert job.is_buildable() is False
        assert job.push_trigger() is trigger


class TestLoadJobsFile:
    def test_loads_jobs_and_builds_triggers(self, tmp_path: Path) -> None:
        jobs_file = tmp_path / "jobs.json"
        jobs_file.write_text(json.dumps([
            {"name": "web/build", "github_repo": "acme/web"},
            {"name": "web/nightly", "github_repo": "acme/web", "buildable": False},
            {"name": "docs/publish"},
        ]))
        repos: list[str] = []

        def factory(repo: str) -> FakePushTrigger:
            repos.append(repo)
            return FakePushTrigger(repo)

        runtime = JobRegistryRuntime()
        count = runtime.load_jobs_file(str(jobs_file), factory)
        runtime.start()
        jobs = runtime.all_jobs()

        assert count == 3
        assert repos == ["acme/web", "acme/web"]
        assert [job.is_buildable() for job in jobs] == [True, False, True]
        assert jobs[2].push_trigger() is None

    def test_non_list_file_rejected(self, tmp_path: Path) -> None:
        jobs_file = tmp_path / "jobs.json"
        jobs_file.write_text(json.dumps({"name": "web/build"}))

        with pytest.raises(ValueError, match="JSON list"):
            JobRegistryRuntime().load_jobs_file(str(jobs_file), FakePushTrigger)

    def test_entry_without_name_rejected(self, tmp_path: Path) -> None:
        jobs_file = tmp_path / "jobs.json"
        jobs_file.write_text(json.dumps([{"github_repo": "acme/web"}]))

        with pytest.raises(ValueError, match="Invalid job entry"):
            JobRegistryRuntime().load_jobs_file(str(jobs_file), FakePushTrigger)
