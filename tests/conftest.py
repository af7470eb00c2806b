import pytest

from fakes import FakeDatabase, FakeMotorClient
from mongotext import ClientFactory, Config
from mongotext.database import Database

MONGOTEXT_ENV = (
    "MONGOTEXT_URI",
    "MONGOTEXT_DB_NAME",
    "MONGOTEXT_CONNECT_TIMEOUT",
    "MONGOTEXT_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    for name in MONGOTEXT_ENV:
        monkeypatch.delenv(name, raising=False)
    Config.reset()
    ClientFactory.set_instance(None)
    FakeMotorClient.instances = []
    FakeMotorClient.ping_error = None
    yield
    Config.reset()
    ClientFactory.set_instance(None)


@pytest.fixture()
def fake_db():
    return FakeDatabase("test")


@pytest.fixture()
def database(fake_db):
    return Database(fake_db)


@pytest.fixture()
def people(database):
    return database.collection("people")


@pytest.fixture()
def fake_people(fake_db, people):
    """The in-memory collection behind the ``people`` handle"""
    return fake_db.collections["people"]


@pytest.fixture()
def seeded(fake_people):
    fake_people.docs.extend([
        {"_id": 1, "name": "Ann", "age": 30, "city": "Oslo"},
        {"_id": 2, "name": "Bob", "age": 25, "city": "Rome"},
        {"_id": 3, "name": "Cid", "age": 41, "city": "Oslo"},
    ])
    return fake_people
