import asyncio
import logging
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Set, Tuple, Union

from fastapi import HTTPException, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.cache import cache
from app.core.constants import EventTypeEnum
from app.core.database import SessionLocal
from app.crud.learning_progress import learning_progress as crud_learning_progress
from app.crud.lesson import lesson as crud_lesson
from app.models.achievement import Achievement
from app.schemas.event import EventPayload
from app.services.achievement_ledger import AchievementLedger, achievement_ledger
from app.services.achievement_rules import AchievementRuleEvaluator, achievement_rule_evaluator
from app.services.progress import ProgressService, progress_service
from app.utils.events import (
    ACHIEVEMENTS_UNLOCKED,
    ACTIVITY_RECORDED,
    LESSON_PROGRESS_UPDATED,
    EventBus,
    event_bus,
)

logger = logging.getLogger(__name__)


def _completion_delta(payload: EventPayload) -> Dict[str, Any]:
    return {"completed": True, "progress": 1.0, "time_spent_delta": payload.time_spent or 0}


def _access_delta(payload: EventPayload) -> Dict[str, Any]:
    return {"last_accessed": datetime.now()}


PROGRESS_EVENTS: Mapping[EventTypeEnum, Callable[[EventPayload], Dict[str, Any]]] = MappingProxyType({
    EventTypeEnum.LESSON_COMPLETED: _completion_delta,
    EventTypeEnum.LESSON_ACCESSED: _access_delta,
})


class EventOutcome(NamedTuple):
    event_type: EventTypeEnum
    payload: EventPayload
    progressed: bool
    unlocked: List[Achievement]


class EventDispatcher:
    def __init__(
        self,
        progress: ProgressService = progress_service,
        evaluator: AchievementRuleEvaluator = achievement_rule_evaluator,
        ledger: AchievementLedger = achievement_ledger,
        bus: EventBus = event_bus,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        self.progress = progress
        self.evaluator = evaluator
        self.ledger = ledger
        self.bus = bus
        self.session_factory = session_factory
        self._background_tasks: Set[asyncio.Task] = set()

    def _parse(
        self, event_type: Union[EventTypeEnum, str], payload: Union[EventPayload, Dict[str, Any], None]
    ) -> Tuple[EventTypeEnum, EventPayload]:
        try:
            event_type = EventTypeEnum(event_type)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Unknown event type: {event_type}"
            )
        if isinstance(payload, EventPayload):
            return event_type, payload
        try:
            return event_type, EventPayload.model_validate(payload or {})
        except ValidationError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Invalid payload for {event_type.value}: {e.errors()[0]['msg']}"
            )

    def _apply_progress(self, db: Session, *, user_id: int, event_type: EventTypeEnum, payload: EventPayload) -> EventPayload:
        if payload.lesson_id is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"lesson_id is required for {event_type.value}"
            )

        lesson = crud_lesson.get(db, id=payload.lesson_id)
        previous = None
        if lesson is not None:
            previous = crud_learning_progress.get_by_user_and_module(db, user_id=user_id, module_id=lesson.module_id)
        was_completed = bool(previous and previous.completed_at)

        learning_progress, _ = self.progress.update_lesson_progress(
            db,
            user_id=user_id,
            lesson_id=payload.lesson_id,
            delta=PROGRESS_EVENTS[event_type](payload),
        )

        updates: Dict[str, Any] = {
            "module_id": learning_progress.module_id,
            "module_completed": learning_progress.completed_at is not None and not was_completed,
        }
        if updates["module_completed"]:
            module = learning_progress.module
            updates["module_category"] = module.category
            updates["module_difficulty"] = module.difficulty
            updates["total_modules_completed"] = crud_learning_progress.count_completed(db, user_id=user_id)
            logger.info(f"User {user_id} completed module {module.id} ({module.category.value})")
        return payload.model_copy(update=updates)

    def _process(
        self,
        db: Session,
        *,
        user_id: int,
        event_type: Union[EventTypeEnum, str],
        payload: Union[EventPayload, Dict[str, Any], None],
    ) -> EventOutcome:
        event_type, payload = self._parse(event_type, payload)

        progressed = event_type in PROGRESS_EVENTS
        if progressed:
            payload = self._apply_progress(db, user_id=user_id, event_type=event_type, payload=payload)

        try:
            candidates = self.evaluator.evaluate(db, user_id=user_id, event_type=event_type, payload=payload)
            unlocked = self.ledger.unlock_eligible(db, user_id=user_id, candidate_ids=candidates)
        except Exception as e:
            logger.error(f"Achievement check for {event_type.value} failed for user {user_id}: {e}", exc_info=True)
            unlocked = []

        return EventOutcome(event_type=event_type, payload=payload, progressed=progressed, unlocked=unlocked)

    async def _publish(self, user_id: int, outcome: EventOutcome):
        if outcome.progressed:
            await self.bus.publish(LESSON_PROGRESS_UPDATED, {"user_id": user_id, "lesson_id": outcome.payload.lesson_id})
        if outcome.unlocked:
            await self.bus.publish(
                ACHIEVEMENTS_UNLOCKED,
                {"user_id": user_id, "event_type": outcome.event_type.value, "types": [a.type for a in outcome.unlocked]},
            )
        await self.bus.publish(ACTIVITY_RECORDED, {"user_id": user_id, "event_type": outcome.event_type.value})

    async def handle_event(
        self,
        db: Session,
        *,
        user_id: int,
        event_type: Union[EventTypeEnum, str],
        payload: Union[EventPayload, Dict[str, Any], None] = None,
    ) -> List[Achievement]:
        """Apply the progress side of an event and unlock whatever it earned.

        Progress errors propagate to the caller. Achievement evaluation is
        advisory: any failure there is logged and yields no achievements.
        """
        outcome = self._process(db, user_id=user_id, event_type=event_type, payload=payload)
        await self._publish(user_id, outcome)
        return outcome.unlocked

    def _log_background_result(self, user_id: int, event_type: str, task: asyncio.Task):
        if task.cancelled():
            logger.warning(f"Background {event_type} dispatch for user {user_id} was cancelled")
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Background {event_type} dispatch for user {user_id} failed: {error}",
                exc_info=(type(error), error, error.__traceback__),
            )
            return
        logger.info(f"Background {event_type} dispatch for user {user_id} unlocked {len(task.result())} achievements")

    def dispatch_in_background(
        self,
        *,
        user_id: int,
        event_type: Union[EventTypeEnum, str],
        payload: Union[EventPayload, Dict[str, Any], None] = None,
    ) -> asyncio.Task:
        """Schedule an event on its own session without waiting for it.

        The database work runs in the threadpool; bus notifications stay on the loop.
        """
        def _process_with_own_session() -> EventOutcome:
            db = self.session_factory()
            try:
                return self._process(db, user_id=user_id, event_type=event_type, payload=payload)
            finally:
                db.close()

        async def _run() -> List[Achievement]:
            outcome = await run_in_threadpool(_process_with_own_session)
            await self._publish(user_id, outcome)
            return outcome.unlocked

        name = event_type.value if isinstance(event_type, EventTypeEnum) else str(event_type)
        task = asyncio.create_task(_run())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(lambda t: self._log_background_result(user_id, name, t))
        return task


async def invalidate_user_dashboard(data: Dict[str, Any]):
    await cache.invalidate_user_cache(data["user_id"])


event_bus.subscribe(ACTIVITY_RECORDED, invalidate_user_dashboard)

event_dispatcher = EventDispatcher()
