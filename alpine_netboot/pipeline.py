from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .context import BuildCtx

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single stage of the build."""

    step_id: str

    def run(self, ctx: BuildCtx) -> BuildCtx:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ctx: BuildCtx
    ran_steps: List[str]

    @property
    def warnings(self) -> List[str]:
        return self.ctx.warnings


def run_pipeline(
    *,
    ctx: BuildCtx,
    steps: Sequence[Step],
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps strictly in order. The first exception aborts the run."""

    if stop_after is not None and stop_after not in {s.step_id for s in steps}:
        raise ValueError(f"Unknown step_id for stop_after: {stop_after}")

    ran: List[str] = []
    for step in steps:
        logger.info("Running step %s", step.step_id)
        ctx = step.run(ctx)
        ctx.completed_steps.append(step.step_id)
        ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    return PipelineResult(ctx=ctx, ran_steps=ran)
