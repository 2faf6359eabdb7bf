import os
import sys

# Point the app at a throwaway database before main.py is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from database import Base, get_db, enable_sqlite_foreign_keys


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# --- small helpers shared by the test modules ---

@pytest.fixture
def make_event(client):
    def _make(title="Intramurals", semester="1st Semester", amount=150, **extra):
        body = {"title": title, "semester": semester, "amount": amount}
        body.update(extra)
        r = client.post("/api/events", json=body)
        assert r.status_code == 201, r.text
        return r.json()["eventId"]
    return _make


@pytest.fixture
def make_student(client):
    def _make(id_number="2021-0001", first="Juan", last="Dela Cruz", course="BSIT", year="4", **extra):
        body = {"IDnumber": id_number, "FirstName": first, "LastName": last, "Course": course, "Year": year}
        body.update(extra)
        r = client.post("/api/records", json=body)
        assert r.status_code == 201, r.text
        return r.json()["student"]["studentID"]
    return _make


@pytest.fixture
def make_transaction(client):
    def _make(student="2021-0001", events=(), method="Cash", **extra):
        body = {"studentID": student, "eventIDs": list(events), "paymentMethod": method}
        body.update(extra)
        r = client.post("/api/transactions", json=body)
        assert r.status_code == 201, r.text
        return r.json()["transaction"]
    return _make
