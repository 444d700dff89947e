from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tagpub.registry.publisher import Credential, PackageRef, PublishError

StepOutcome = Literal["not-run", "succeeded", "failed"]
JobOutcome = Literal["pending", "succeeded", "failed"]


@dataclass(frozen=True, slots=True)
class PublishStep:
    """One package publish inside a release job."""

    package: PackageRef
    include_all_variants: bool
    # Consistency wait before the next step; None when no later step consumes this one.
    wait_after_seconds: float | None = None
    # Version consumers will resolve; only needed when polling the index.
    version: str | None = None

    @property
    def id(self) -> str:
        return self.package.name


@dataclass(frozen=True, slots=True)
class ReleaseJob:
    """All steps for one tag, in publish order."""

    tag: str
    steps: tuple[PublishStep, ...]
    credential: Credential


@dataclass(frozen=True, slots=True)
class StepResult:
    step_id: str
    outcome: StepOutcome
    error: PublishError | None = None


@dataclass(frozen=True, slots=True)
class PipelineResult:
    tag: str
    outcome: JobOutcome
    steps: tuple[StepResult, ...]
    waits_performed: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome == "succeeded"

    @property
    def failed_step(self) -> StepResult | None:
        for step in self.steps:
            if step.outcome == "failed":
                return step
        return None

    @property
    def error(self) -> PublishError | None:
        failed = self.failed_step
        return failed.error if failed is not None else None

    def outcome_of(self, step_id: str) -> StepOutcome:
        for step in self.steps:
            if step.step_id == step_id:
                return step.outcome
        raise KeyError(step_id)
