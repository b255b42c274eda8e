"""In-process server runtime adapter.

Implements ServerRuntimePort with a simple job registry. Jobs can be
registered programmatically or loaded from a JSON jobs file:

    [
        {"name": "web/build", "github_repo": "acme/web"},
        {"name": "web/nightly", "github_repo": "acme/web", "buildable": false},
        {"name": "docs/publish"}
    ]

Jobs with a "github_repo" get a push trigger built by the supplied factory.
"""

import json
import logging
from collections.abc import Callable, Sequence
from pathlib import Path

from hookkeeper.core.exceptions import RuntimeUnavailableError
from hookkeeper.core.ports import Job, PushTrigger, ServerRuntimePort

logger = logging.getLogger(__name__)

TriggerFactory = Callable[[str], PushTrigger]


class RegisteredJob(Job):
    """A job held by the in-process registry."""

    def __init__(
        self,
        name: str,
        buildable: bool = True,
        trigger: PushTrigger | None = None,
    ):
        if not name or not name.strip():
            raise ValueError("job name must be a non-empty string")
        self.name = name
        self.buildable = buildable
        self.trigger = trigger

    @property
    def full_name(self) -> str:
        return self.name

    def is_buildable(self) -> bool:
        return self.buildable

    def push_trigger(self) -> PushTrigger | None:
        return self.trigger


class JobRegistryRuntime(ServerRuntimePort):
    """Server runtime backed by an in-memory list of jobs."""

    def __init__(self, root_url: str | None = None):
        """Initialize the runtime.

        Args:
            root_url: Externally visible root URL of the server, if known.
        """
        self._root_url = root_url or None
        self._jobs: list[Job] = []
        self.running = False

    def start(self) -> None:
        self.running = True
        logger.info(f"Server runtime started with {len(self._jobs)} jobs")

    def stop(self) -> None:
        self.running = False
        logger.info("Server runtime stopped")

    def _require_running(self) -> None:
        if not self.running:
            raise RuntimeUnavailableError(
                "Server runtime has not been started, or was already shut down"
            )

    def root_url(self) -> str | None:
        self._require_running()
        return self._root_url

    def all_jobs(self) -> Sequence[Job]:
        self._require_running()
        return tuple(self._jobs)

    def add_job(self, job: Job) -> None:
        self._jobs.append(job)

    def load_jobs_file(self, path: str, trigger_factory: TriggerFactory) -> int:
        """Register jobs from a JSON jobs file.

        Args:
            path: Path to the JSON file (a list of job objects).
            trigger_factory: Builds a push trigger for an "owner/repo" string.

        Returns:
            Number of jobs loaded.

        Raises:
            ValueError: If the file is not a list of job objects.
        """
        entries = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(entries, list):
            raise ValueError(f"Jobs file {path} must contain a JSON list")

        for entry in entries:
            if not isinstance(entry, dict) or "name" not in entry:
                raise ValueError(f"Invalid job entry in {path}: {entry!r}")
            repo = entry.get("github_repo")
            self.add_job(
                RegisteredJob(
                    name=entry["name"],
                    buildable=bool(entry.get("buildable", True)),
                    trigger=trigger_factory(repo) if repo else None,
                )
            )

        logger.info(f"Loaded {len(entries)} jobs from {path}")
        return len(entries)
