"""Base class for import stage workers.

Each worker performs one stage operation for a single episode. The job
manager runs these operations inside the stage's StageExecutor.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class StageWorker(ABC):
    """Abstract base class for stage workers.

    Subclasses implement `process`, which either returns the stage's output
    for the episode or raises an ImportJobError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this worker."""
        pass

    @abstractmethod
    async def process(self, *args: Any) -> Any:
        """Run the stage operation for one episode."""
        pass

    def log_done(self, episode_id: int) -> None:
        logger.debug(f"[{self.name}] Episode {episode_id} done")
