import os

# in-memory database, admin left open
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("ADMIN_KEY", None)

import pytest
from fastapi.testclient import TestClient

from foursome import crud, schemas
from foursome.db import Base, SessionLocal, engine
from foursome.main import app


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def group(db):
    return crud.create_group(
        db,
        schemas.GroupCreate(number=1, pin="1234", players=["Alice", "Bob"], tournament_id="spring"),
    )


@pytest.fixture
def pars():
    return [4, 4, 3, 5, 4, 4, 3, 4, 5, 4, 4, 3, 5, 4, 4, 3, 4, 5]


@pytest.fixture
def hcps():
    return list(range(1, 19))
