# gallery/services/saga.py
# Ordered step list for multi-step side effects with no transaction around them.
#
# fatal=True  -> the first failure stops the remaining normal steps and is re-raised at the end
# fatal=False -> failure is logged and the list continues
# always=True -> runs even after a fatal failure (cleanup)

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Step:
    name: str
    action: Callable[[Any], Awaitable[None]]
    fatal: bool = True
    always: bool = False


async def run_steps(steps: List[Step], state: Any, pipeline: str = "pipeline") -> None:
    failure: Optional[BaseException] = None
    for step in steps:
        if failure is not None and not step.always:
            logger.debug(f"[{pipeline}] skip {step.name}")
            continue
        try:
            await step.action(state)
        except Exception as e:
            if step.fatal and failure is None:
                logger.warning(f"[{pipeline}] {step.name} failed: {e}")
                failure = e
            else:
                logger.error(f"[{pipeline}] {step.name} failed (ignored): {e}")
    if failure is not None:
        raise failure
