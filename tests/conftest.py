import os

# Must be set before anything imports app.config / app.database
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["PACING_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import event

from app.config import Settings
from app.database import Base, SessionLocal, engine, get_db
from app.main import app


# pysqlite defers BEGIN, which breaks SAVEPOINT; take over transaction control
@event.listens_for(engine, "connect")
def _sqlite_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_settings():
    def _make(**overrides) -> Settings:
        values = {
            "database_url": "sqlite://",
            "pacing_enabled": False,
            "scheduler_enabled": False,
            "scraper_api_key": "",
            "telegram_bot_token": "",
            "whatsapp_account_sid": "",
            "whatsapp_auth_token": "",
            "whatsapp_from_number": "",
            "offerup_cookies": "",
            "nextdoor_cookies": "",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
