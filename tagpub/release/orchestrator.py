"""Sequencing of publish steps and consistency waits.

``Pending -> RunningStep(i) -> RunningStep(i+1) | Failed``, and
``RunningStep(last) -> Succeeded``. The first failing step stops the job:
later steps are never invoked and nothing already published is rolled
back. There is no retry here; re-running a job re-runs every step, so
versions that were already published surface as publish errors.
"""

from __future__ import annotations

from tagpub.core.result import Err
from tagpub.output.console import ConsoleProtocol, Style
from tagpub.registry.publisher import RegistryPublisher
from tagpub.release.model import PipelineResult, ReleaseJob, StepResult
from tagpub.release.waiter import ConsistencyWaiter


class ReleaseOrchestrator:
    def __init__(
        self,
        *,
        publisher: RegistryPublisher,
        waiter: ConsistencyWaiter,
        console: ConsoleProtocol,
    ) -> None:
        self._publisher = publisher
        self._waiter = waiter
        self._console = console

    def run(self, job: ReleaseJob) -> PipelineResult:
        self._console.add_secret(job.credential.reveal())

        results: list[StepResult] = []
        waits = 0
        total = len(job.steps)

        for index, step in enumerate(job.steps):
            self._console.header(f"[{index + 1}/{total}] publish {step.package.describe()}")
            outcome = self._publisher.publish(
                step.package,
                job.credential,
                include_all_variants=step.include_all_variants,
            )

            if isinstance(outcome, Err):
                error = outcome.error
                self._console.error(error.message)
                if error.detail:
                    self._console.print(error.detail, Style.DIM)
                results.append(StepResult(step_id=step.id, outcome="failed", error=error))
                results.extend(
                    StepResult(step_id=rest.id, outcome="not-run") for rest in job.steps[index + 1 :]
                )
                return PipelineResult(
                    tag=job.tag,
                    outcome="failed",
                    steps=tuple(results),
                    waits_performed=waits,
                )

            self._console.success(f"published {step.id}")
            results.append(StepResult(step_id=step.id, outcome="succeeded"))

            if step.wait_after_seconds is not None and index < total - 1:
                self._waiter.wait(step, step.wait_after_seconds)
                waits += 1

        return PipelineResult(
            tag=job.tag,
            outcome="succeeded",
            steps=tuple(results),
            waits_performed=waits,
        )
