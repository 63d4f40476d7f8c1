import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ["AUTO_CLAIM_ENABLED"] = "false"
os.environ.pop("API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from launchpad.api.dependencies import get_token_store
from launchpad.api.main import app
from launchpad.api.models import LaunchRequest
from launchpad.models.base import Base
from launchpad.services.token_store import TokenStore

TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PLATFORM_WALLET = "0x9999999999999999999999999999999999999999"
CLIENT_WALLET = "0x1111111111111111111111111111111111111111"
DEV_WALLET = "0x2222222222222222222222222222222222222222"
TOKEN_ADDRESS = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"
PAIRED_ASSET = "0x4200000000000000000000000000000000000006"
TX_HASH = "0x" + "ab" * 32


@pytest.fixture(autouse=True, scope="session")
def configure_logging():
    import logging
    import structlog

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(),
    )

    root_logger = logging.getLogger()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def token_store(db_session):
    return TokenStore(TestingSessionLocal)


@pytest.fixture
def client(token_store):
    app.dependency_overrides[get_token_store] = lambda: token_store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_token(token_store):
    """Insert a deployment record with sensible defaults"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        fields = {
            "name": f"Token {counter['n']}",
            "symbol": f"TK{counter['n']}",
            "token_address": "0x" + f"{counter['n']:040x}",
            "tx_hash": "0x" + f"{counter['n']:064x}",
            "requester_address": CLIENT_WALLET,
            "requester_bps": 8000,
            "platform_bps": 2000,
        }
        fields.update(overrides)
        return token_store.insert_token(**fields)

    return _make


@pytest.fixture
def launch_payload():
    return {
        "name": "Test Agent",
        "symbol": "tagent",
        "clientWallet": CLIENT_WALLET,
        "description": "An agent token",
        "image": "https://example.com/logo.png",
        "vault": {"percentage": 10, "lockupDays": 30, "vestingDays": 30},
        "fees": {"type": "static", "bps": 100},
        "feeSplit": [{"wallet": DEV_WALLET, "share": 30, "role": "dev"}],
    }


@pytest.fixture
def launch_request(launch_payload):
    return LaunchRequest(**launch_payload)
