"""Load progress tracking.

Every fetch counts as one task, whether it succeeds or falls back to an
empty collection, so the percentage always reaches 100.
"""

from __future__ import annotations

from loguru import logger


class LoadingProgress:
    """Counts fetch tasks and reports completion percentage."""

    def __init__(self, label: str = "SIMA data") -> None:
        self.label = label
        self.total_tasks = 0
        self.completed_tasks = 0
        self.message = ""

    @property
    def percentage(self) -> int:
        if self.total_tasks == 0:
            return 0
        return (self.completed_tasks * 100) // self.total_tasks

    @property
    def done(self) -> bool:
        return self.total_tasks > 0 and self.completed_tasks >= self.total_tasks

    def add_task(self) -> None:
        self.total_tasks += 1
        self._update()

    def complete_task(self, task_name: str | None = None) -> None:
        self.completed_tasks += 1
        self._update(task_name)
        if self.done:
            logger.info(f"All {self.total_tasks} load task(s) finished")

    def _update(self, task_name: str | None = None) -> None:
        if task_name:
            self.message = f"Loading: {task_name} ({self.percentage}%)"
            logger.debug(self.message)
        else:
            self.message = f"Loading {self.label}... ({self.percentage}%)"
