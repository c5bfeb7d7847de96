import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("CACHE_ENABLED", "false")

import asyncio
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import main
from app.core.cache import cache
from app.core.config import settings
from app.core.constants import DifficultyLevelEnum, ModuleCategoryEnum, UserLevelEnum, UserRoleEnum
from app.core.database import Base, build_engine
from app.core.security import create_access_token
from app.models.learning_session import LearningSession
from app.models.lesson import Lesson
from app.models.module import Module
from app.models.user import User
from app.services.event_dispatcher import event_dispatcher
from app.services.progress import progress_service
from app.utils import deps as deps_utils

test_db_url = settings.TEST_DATABASE_URL or "sqlite://"


@pytest.fixture(scope="function")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = build_engine(test_db_url, poolclass=StaticPool)
    else:
        engine = build_engine(test_db_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def session_factory(database_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=database_engine)

@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture(scope="function")
def client(db_session, session_factory, monkeypatch):
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    monkeypatch.setattr(event_dispatcher, "session_factory", session_factory)
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def user_factory(db_session):
    def _user_factory(email: Optional[str] = None, level: UserLevelEnum = UserLevelEnum.BEGINNER, is_active: bool = True):
        user = User(
            full_name="Test Student",
            email=email or f"student-{uuid.uuid4().hex[:8]}@example.com",
            level=level,
            role=UserRoleEnum.STUDENT,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _user_factory

@pytest.fixture
def module_factory(db_session):
    counter = {"order": 0}

    def _module_factory(
        category: ModuleCategoryEnum = ModuleCategoryEnum.FUNDAMENTALS,
        difficulty: DifficultyLevelEnum = DifficultyLevelEnum.BEGINNER,
        lessons: int = 3,
        estimated_time: int = 30,
        prerequisites: Optional[List[Module]] = None,
        is_active: bool = True,
    ) -> Module:
        counter["order"] += 1
        module = Module(
            title=f"Module {counter['order']} {uuid.uuid4().hex[:6]}",
            category=category,
            difficulty=difficulty,
            order=counter["order"],
            estimated_time=estimated_time * lessons,
            is_active=is_active,
        )
        module.prerequisites = list(prerequisites or [])
        db_session.add(module)
        db_session.flush()
        for index in range(lessons):
            db_session.add(Lesson(
                title=f"Lesson {index + 1}",
                order=index + 1,
                estimated_time=estimated_time,
                module_id=module.id,
            ))
        db_session.commit()
        db_session.refresh(module)
        return module
    return _module_factory

@pytest.fixture
def student(user_factory):
    return user_factory()

@pytest.fixture
def auth_headers(student):
    return {"Authorization": f"Bearer {create_access_token(student.id)}"}

@pytest.fixture
def complete_lessons(db_session):
    """Mark lessons complete through the aggregator, ``minutes`` each."""
    def _complete(user: User, lessons: List[Lesson], minutes: int = 10):
        for lesson in lessons:
            progress_service.update_lesson_progress(
                db_session,
                user_id=user.id,
                lesson_id=lesson.id,
                delta={"completed": True, "progress": 1.0, "time_spent_delta": minutes},
            )
    return _complete

@pytest.fixture
def learning_session_factory(db_session):
    """Insert one learning session per entry of ``start_times``."""
    def _sessions(user: User, start_times: List[datetime]):
        for start_time in start_times:
            db_session.add(LearningSession(
                id=f"{user.id}-{start_time.date().isoformat()}",
                user_id=user.id,
                start_time=start_time,
                lessons_viewed=0,
                quizzes_taken=0,
            ))
        db_session.commit()
    return _sessions

@pytest.fixture
def days_ago():
    def _days_ago(days: int, hour: Optional[int] = None) -> datetime:
        moment = datetime.now() - timedelta(days=days)
        if hour is not None:
            moment = moment.replace(hour=hour, minute=0, second=0, microsecond=0)
        return moment
    return _days_ago

@pytest.fixture
def enabled_cache(monkeypatch):
    monkeypatch.setattr(settings, "CACHE_ENABLED", True)
    asyncio.run(cache.clear())
    yield cache
    asyncio.run(cache.clear())
