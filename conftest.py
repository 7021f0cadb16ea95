# conftest.py

from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from mentorship.database import Base, get_db
from mentorship.models import User
from mentorship.schemas import CurriculumEntry
from mentorship.services.blob_store import BlobStore
from mentorship.services.curriculum import CurriculumCatalog
from mentorship.services.scheduler import MaintenanceScheduler
from mentorship.services.task_service import TaskService
from mentorship.utils.security import hash_password

CURRICULUM_TITLE = "Strivers A2Z DSA Course"


@pytest.fixture()
def engine():
    """
    One in-memory SQLite database per test. StaticPool keeps a single
    connection so every session (and the TestClient threadpool) sees it.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def blob_store(tmp_path) -> BlobStore:
    store = BlobStore(str(tmp_path / "uploads"), max_file_size=1024 * 1024)
    store.open()
    return store


@pytest.fixture()
def catalog() -> CurriculumCatalog:
    return CurriculumCatalog([
        CurriculumEntry(
            id=101,
            platform="LeetCode",
            practiceLinks=["https://leetcode.com/problems/two-sum/"],
            resourceLinks=["https://takeuforward.org/two-sum"],
        ),
        CurriculumEntry(
            id=102,
            platform="LeetCode",
            practiceLinks=["https://leetcode.com/problems/sort-colors/"],
            resourceLinks=[],
        ),
        CurriculumEntry(
            id=103,
            platform="GeeksforGeeks",
            practiceLinks=["https://www.geeksforgeeks.org/problems/leaders-in-an-array/1"],
            resourceLinks=["https://takeuforward.org/leaders"],
        ),
    ])


@pytest.fixture()
def maintenance(session_factory, blob_store, catalog) -> MaintenanceScheduler:
    return MaintenanceScheduler(
        session_factory,
        blob_store,
        catalog,
        curriculum_title=CURRICULUM_TITLE,
        retention_days=2,
        pending_timeout_days=5,
        orphan_grace_hours=24,
    )


@pytest.fixture()
def service(db, blob_store) -> TaskService:
    return TaskService(db, blob_store)


@pytest.fixture()
def make_user(db):
    """Insert a mentee directly; password is always 'secret'."""

    def _make_user(user_id: str, fullname: Optional[str] = None, mentor: Optional[str] = None) -> User:
        user = User(
            user_id=user_id,
            fullname=fullname or f"Mentee {user_id}",
            domain="Web Development",
            mentor=mentor,
            password_hash=hash_password("secret"),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def client(session_factory, blob_store, catalog, maintenance):
    """TestClient wired to the per-test database, blob store and scheduler."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.blob_store = blob_store
    app.state.catalog = catalog
    app.state.maintenance = maintenance

    yield TestClient(app)

    app.dependency_overrides.clear()
    for name in ("blob_store", "catalog", "maintenance"):
        if hasattr(app.state, name):
            delattr(app.state, name)
