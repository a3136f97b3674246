"""Navigation trail: ordered history of UI state transitions."""

from collections.abc import Iterator
from typing import Any

from loguru import logger

from slurp.models.event import TrailStep


class NavigationTrail:
    """Append-only list of TrailSteps for the lifetime of a tab."""

    def __init__(self) -> None:
        self._steps: list[TrailStep] = []

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[TrailStep]:
        return iter(self._steps)

    def record_transition(
        self,
        from_state: str | None,
        to_state: str | None,
        params: dict[str, Any] | None,
        now: float,
    ) -> TrailStep:
        """Append a transition stamped at `now`.

        The step starts where the previous step ended, so that
        ``to_time - from_time`` measures the time spent preparing the new state.
        """
        from_time = now
        elapsed = ""
        previous = self.latest()
        if previous is not None:
            from_time = previous.to_time
            elapsed = f" after {now - from_time:.3f} secs"

        step = TrailStep(
            from_state=from_state,
            from_time=from_time,
            to_state=to_state,
            to_time=now,
            params=dict(params or {}),
        )
        self._steps.append(step)
        logger.debug("State changed from {} to {}{}", from_state, to_state, elapsed)
        return step

    def latest(self) -> TrailStep | None:
        """Return the most recent step, or None if nothing was recorded yet."""
        return self._steps[-1] if self._steps else None
