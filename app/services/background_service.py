"""
BackgroundJobs: runs work after the HTTP response has been sent.

Jobs are handed to FastAPI's BackgroundTasks. A failing job never reaches the
webhook caller. It is logged and kept in a bounded failure list that the
diagnostic routes expose.
"""

import logging
from collections import deque
from dataclasses import dataclass, asdict
from typing import Any, Awaitable, Callable, List

from fastapi import BackgroundTasks

from app.utils.helpers import utc_now_iso

logger = logging.getLogger(__name__)


@dataclass
class JobFailure:
    name: str
    error: str
    failed_at: str

    def to_dict(self) -> dict:
        return asdict(self)


class BackgroundJobs:

    def __init__(self, max_failures: int = 100):
        self._failures = deque(maxlen=max_failures)

    def schedule(self, background_tasks: BackgroundTasks, name: str,
                 func: Callable[..., Awaitable[Any]], *args, **kwargs) -> None:
        """Detaches `func(*args, **kwargs)` from the request; it runs once the response is out."""
        logger.info("Scheduling background job '%s'", name)
        background_tasks.add_task(self.run, name, func, *args, **kwargs)

    async def run(self, name: str, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            logger.exception("Background job '%s' failed: %s", name, e)
            self._failures.append(JobFailure(name=name, error=f"{type(e).__name__}: {e}", failed_at=utc_now_iso()))
            return None
        logger.info("Background job '%s' finished", name)
        return result

    @property
    def failures(self) -> List[JobFailure]:
        return list(self._failures)
