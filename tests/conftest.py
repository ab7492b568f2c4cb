from types import SimpleNamespace

import pytest
from sqlalchemy.orm import sessionmaker

from bakery_pos.clock import FixedClock
from bakery_pos.database import create_db_engine, init_db
from tests.factories import NOW, make_catalog


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'bakery.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def catalog(db):
    return SimpleNamespace(**make_catalog(db))
