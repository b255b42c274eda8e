"""Re-registration coordinator.

Pushes hook registration out to every buildable job that has a push
trigger. Passes are serialized through a single-worker queue so two
administrators pressing "re-register" never interleave registration calls
against GitHub.
"""

import logging

from .exceptions import PolicyError
from .hook_config import HookConfigurationStore
from .models import FailurePolicy, JobFailure, ReRegistrationReport
from .ports import ServerRuntimePort
from .queue import SequentialExecutionQueue

logger = logging.getLogger(__name__)


class ReRegistrationCoordinator:
    """Runs re-registration passes across all jobs, one pass at a time."""

    def __init__(
        self,
        config_store: HookConfigurationStore,
        runtime: ServerRuntimePort,
        queue: SequentialExecutionQueue | None = None,
        failure_policy: FailurePolicy = FailurePolicy.ABORT,
    ):
        """Initialize the coordinator.

        Args:
            config_store: Source of the manage_hook flag.
            runtime: Server runtime listing the jobs.
            queue: Single-worker queue passes run on.
            failure_policy: Whether a failing job aborts the pass.
        """
        self.config_store = config_store
        self.runtime = runtime
        self.queue = queue or SequentialExecutionQueue(name="re-register")
        self.failure_policy = failure_policy

    async def re_register_all(self) -> ReRegistrationReport:
        """Call register_hooks() on every buildable job's push trigger.

        Returns:
            Report with the number of jobs registration was attempted for.

        Raises:
            PolicyError: If hooks are managed manually. No job is touched.
            RuntimeUnavailableError: If the server runtime is not running.
            Exception: Under FailurePolicy.ABORT, the first registration failure.
        """
        if not self.config_store.manage_hook:
            raise PolicyError("Works only when hooks are managed automatically")

        return await self.queue.submit(self._run_pass)

    async def _run_pass(self) -> ReRegistrationReport:
        # manage_hook may have flipped while this pass was queued
        if not self.config_store.manage_hook:
            raise PolicyError("Works only when hooks are managed automatically")

        triggered = 0
        failures: list[JobFailure] = []

        for job in self.runtime.all_jobs():
            if not job.is_buildable():
                continue

            trigger = job.push_trigger()
            if trigger is None:
                continue

            logger.debug(f"Calling register_hooks() for {job.full_name}")
            triggered += 1
            try:
                await trigger.register_hooks()
            except Exception as e:
                if self.failure_policy is FailurePolicy.ABORT:
                    logger.error(
                        f"register_hooks() failed for {job.full_name}, aborting pass: {e}",
                        extra={"job": job.full_name, "jobs_triggered": triggered},
                    )
                    raise
                logger.error(
                    f"register_hooks() failed for {job.full_name}: {e}",
                    exc_info=True,
                    extra={"job": job.full_name},
                )
                failures.append(JobFailure(job_name=job.full_name, error=str(e)))

        logger.info(
            f"Called register_hooks() for {triggered} jobs",
            extra={"jobs_triggered": triggered, "failures": len(failures)},
        )
        return ReRegistrationReport(jobs_triggered=triggered, failures=tuple(failures))

    async def close(self) -> None:
        await self.queue.close()
