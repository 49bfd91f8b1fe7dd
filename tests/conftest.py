import os
import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


# Ensure `import backend.portal...` works regardless of where pytest is run from.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Must be set before anything imports backend.portal.config.
os.environ["DISABLE_DOTENV"] = "1"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["NOTIFIER_BACKEND"] = "console"
os.environ["COOKIE_SECURE"] = "0"
os.environ["ADMIN_BOOTSTRAP_EMAIL"] = ""
os.environ["ADMIN_BOOTSTRAP_PASSWORD"] = ""

ADMIN_EMAIL = "ops@example.com"
ADMIN_PASSWORD = "Adminpass123!"
CANDIDATE_PHONE = "+15550001"
CANDIDATE_EMAIL = "jane@example.com"


class RecordingNotifier:
    """Captures codes instead of delivering them; can be told to fail."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    def send(self, identifier: str, code: str) -> None:
        from backend.portal.utils.error_handlers import DeliveryFailedError

        if self.fail:
            raise DeliveryFailedError()
        self.sent.append((identifier, code))

    def last_code(self, identifier: str) -> str:
        for sent_to, code in reversed(self.sent):
            if sent_to == identifier:
                return code
        raise AssertionError(f"no code sent to {identifier}")


@pytest.fixture(scope="session")
def test_db_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return tmp_path_factory.mktemp("db") / "test.sqlite3"


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def app(test_db_path: Path, notifier: RecordingNotifier) -> FastAPI:
    """
    Create a FastAPI app wired to a temporary SQLite DB.

    We build the app here rather than importing `portal.main` so startup hooks
    never touch the developer database.
    """
    os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{test_db_path}"

    from backend.portal import database as db

    engine = create_engine(
        os.environ["DATABASE_URL"],
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    # Patch the shared database module so router dependencies use the test DB.
    db.engine = engine
    db.SessionLocal = TestingSessionLocal

    db.import_models()
    db.Base.metadata.drop_all(bind=engine)
    db.Base.metadata.create_all(bind=engine)

    from backend.portal.main import include_routers, register_exception_handlers
    from backend.portal.services.notifier import get_notifier

    fastapi_app = FastAPI()
    include_routers(fastapi_app)
    register_exception_handlers(fastapi_app)
    fastapi_app.dependency_overrides[get_notifier] = lambda: notifier

    return fastapi_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def db_session(app: FastAPI):
    """
    Direct SQLAlchemy session bound to the same temporary SQLite DB used by the test app.
    """
    from backend.portal import database

    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def candidate(db_session):
    from backend.portal.services.user_service import register_candidate

    return register_candidate(db_session, phone=CANDIDATE_PHONE, email=CANDIDATE_EMAIL, display_name="Jane")


@pytest.fixture()
def admin_account(db_session):
    from backend.portal.services.admin_service import create_admin_account

    return create_admin_account(db_session, email=ADMIN_EMAIL, password=ADMIN_PASSWORD, name="Ops")


def candidate_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def admin_headers(token: str) -> dict:
    return {"X-Admin-Token": token}


def login_candidate(client: TestClient, notifier: RecordingNotifier, identifier: str = CANDIDATE_PHONE) -> str:
    r = client.post("/auth/send-otp", json={"identifier": identifier})
    assert r.status_code == 202, r.text
    r = client.post("/auth/verify-otp", json={"identifier": identifier, "code": notifier.last_code(identifier)})
    assert r.status_code == 200, r.text
    # Tests pass credentials explicitly; drop the cookie jar so slots never mix.
    client.cookies.clear()
    return r.json()["access_token"]


def login_admin(client: TestClient, email: str = ADMIN_EMAIL, password: str = ADMIN_PASSWORD) -> str:
    r = client.post("/admin/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    client.cookies.clear()
    return r.json()["admin_token"]


FULL_DOCKET = {
    "passportFrontUrl": "https://blobs.example.com/p-front.pdf",
    "passportLastUrl": "https://blobs.example.com/p-last.pdf",
    "passportPhotoUrl": "https://blobs.example.com/p-photo.jpg",
    "offerLetterUrl": "https://blobs.example.com/offer.pdf",
    "permanentAddressUrl": "https://blobs.example.com/perm.pdf",
    "currentAddressUrl": "https://blobs.example.com/current.pdf",
}
