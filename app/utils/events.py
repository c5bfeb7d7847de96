from typing import Any, Awaitable, Callable, Dict, List, Union
import asyncio
from concurrent.futures import ThreadPoolExecutor
import logging

logger = logging.getLogger(__name__)

ACHIEVEMENTS_UNLOCKED = "achievements_unlocked"
LESSON_PROGRESS_UPDATED = "lesson_progress_updated"
ACTIVITY_RECORDED = "activity_recorded"

Handler = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]

class EventBus:
    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}
        self._executor = ThreadPoolExecutor(max_workers=4)

    def subscribe(self, event_name: str, handler: Handler):
        handlers = self._handlers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_name: str, handler: Handler):
        if handler in self._handlers.get(event_name, []):
            self._handlers[event_name].remove(handler)

    async def publish(self, event_name: str, data: Dict[str, Any]):
        handlers = list(self._handlers.get(event_name, []))
        if not handlers:
            return

        loop = asyncio.get_running_loop()
        tasks = []
        for handler in handlers:
            if asyncio.iscoroutinefunction(handler):
                tasks.append(asyncio.create_task(handler(data)))
            else:
                tasks.append(loop.run_in_executor(self._executor, handler, data))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for handler, result in zip(handlers, results):
            if isinstance(result, Exception):
                logger.error(f"Error in {event_name} handler {handler.__name__}: {result}")

event_bus = EventBus()
