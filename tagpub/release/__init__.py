"""Release job planning and the ordered publish protocol."""

from __future__ import annotations

from .errors import PlanError
from .model import PipelineResult, PublishStep, ReleaseJob, StepResult
from .orchestrator import ReleaseOrchestrator
from .planner import credential_from_env, plan_release, publish_order, tag_qualifies
from .waiter import ConsistencyWaiter, FixedDelayWaiter, PollingWaiter, waiter_from_config

__all__ = [
    "ConsistencyWaiter",
    "FixedDelayWaiter",
    "PipelineResult",
    "PlanError",
    "PollingWaiter",
    "PublishStep",
    "ReleaseJob",
    "ReleaseOrchestrator",
    "StepResult",
    "credential_from_env",
    "plan_release",
    "publish_order",
    "tag_qualifies",
    "waiter_from_config",
]
