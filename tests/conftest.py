from datetime import date

import pytest
import structlog
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import pacer.models  # noqa: F401
from pacer.crud import create_textbook
from pacer.database import Base
from pacer.schemas import TextbookCreate
from pacer.weekday_goals import weekday_preset

# Mon-Fri 10, Sat/Sun 5: 60 problems a week
WEEKDAY_10_WEEKEND_5 = weekday_preset(10, 5)
PLAN_START = date(2024, 4, 1)  # a Monday


@pytest.fixture(autouse=True)
def reset_structlog():
    """The CLI configures structlog against the runner's stderr; undo that after each test"""
    yield
    structlog.reset_defaults()


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def textbook(db):
    return create_textbook(db, TextbookCreate(title="Blue Chart", subject="Math", total_problems=300))
