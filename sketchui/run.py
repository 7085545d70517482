"""Run context: status state machine and observer hooks for one pipeline run."""

import logging
from typing import Callable

from sketchui.state import FinalArtifact, Plan, RenderedItem, RunStatus

logger = logging.getLogger(__name__)

StatusObserver = Callable[[RunStatus], None]
ItemObserver = Callable[[RenderedItem], None]

# Forward-only transitions; "failed" is reachable from every working status.
_TRANSITIONS: dict[str, set[str]] = {
    "idle": {"planning"},
    "planning": {"rendering", "failed"},
    "rendering": {"assembling", "failed"},
    "assembling": {"completed", "failed"},
    "completed": set(),
    "failed": set(),
}
IN_FLIGHT = {"planning", "rendering", "assembling"}


class Run:
    """State of one end-to-end run.

    Only the pipeline driver calls ``advance`` and ``fail``. Observers are
    notified after every status change and every item status change; the
    pipeline does not depend on anyone listening.
    """

    def __init__(
        self,
        on_status: StatusObserver | None = None,
        on_item: ItemObserver | None = None,
    ):
        self.on_status = on_status
        self.on_item = on_item
        self.status: RunStatus = "idle"
        self.error: str | None = None
        self.error_kind: str | None = None
        self.plan: Plan | None = None
        self.items: list[RenderedItem] = []
        self.artifact: FinalArtifact | None = None

    @property
    def in_flight(self) -> bool:
        return self.status in IN_FLIGHT

    def advance(self, status: RunStatus) -> None:
        """Move to the next status. Raises RuntimeError on an illegal transition."""
        if status == "failed":
            raise RuntimeError("Use fail() to end a run in the failed status.")
        self._transition(status)

    def fail(self, message: str, kind: str) -> None:
        """End the run in ``failed`` and record the human-readable cause."""
        self.error = message
        self.error_kind = kind
        self._transition("failed")

    def reset(self) -> None:
        """Clear the previous run's results and return to ``idle``."""
        if self.in_flight:
            raise RuntimeError(f"Cannot reset a run that is still {self.status}.")
        self.error = None
        self.error_kind = None
        self.plan = None
        self.items = []
        self.artifact = None
        if self.status != "idle":
            self.status = "idle"
            self._notify_status()

    def track_item(self, item: RenderedItem) -> None:
        """Mirror a published item record into ``items`` and notify observers."""
        for index, existing in enumerate(self.items):
            if existing["id"] == item["id"]:
                self.items[index] = item
                break
        else:
            self.items.append(item)

        if self.on_item is not None:
            try:
                self.on_item(item)
            except Exception:
                logger.exception("Item observer raised for '%s'; ignoring", item["id"])

    def _transition(self, status: RunStatus) -> None:
        if status not in _TRANSITIONS[self.status]:
            raise RuntimeError(f"Illegal run status transition {self.status} -> {status}.")
        logger.info("Run status: %s -> %s", self.status, status)
        self.status = status
        self._notify_status()

    def _notify_status(self) -> None:
        if self.on_status is None:
            return
        try:
            self.on_status(self.status)
        except Exception:
            logger.exception("Status observer raised on '%s'; ignoring", self.status)
