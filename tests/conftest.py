import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret"

import httpx  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from stepwise.application.services.auth_service import TokenVerifier  # noqa: E402
from stepwise.application.services.demo_service import DemoService  # noqa: E402
from stepwise.application.services.hotspot_service import HotspotService  # noqa: E402
from stepwise.application.services.step_service import StepService  # noqa: E402
from stepwise.application.services.upload_service import UploadService  # noqa: E402
from stepwise.domain.models.user import User  # noqa: E402
from stepwise.infrastructure.database import Base, SessionLocal, engine, get_db  # noqa: E402
from stepwise.infrastructure.storage import StorageClient  # noqa: E402
from stepwise.interfaces.deps import get_storage_client, get_token_verifier  # noqa: E402
from stepwise.main import app  # noqa: E402

STORAGE_URL = "http://storage.test"
BUCKET = "step-image"
OBJECT_PATH = f"/storage/v1/object/{BUCKET}/"


class FakeStorage:
    """In-memory stand-in for the storage REST API, served through httpx.MockTransport."""

    def __init__(self):
        self.objects = {}
        self.requests = []
        self.failures = []

    def fail_next(self, *responses):
        self.failures.extend(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failures:
            failure = self.failures.pop(0)
            if isinstance(failure, Exception):
                raise failure
            return failure

        key = request.url.path.split(OBJECT_PATH, 1)[1]
        if request.method == "POST":
            self.objects[key] = request.content
            return httpx.Response(200, json={"Key": f"{BUCKET}/{key}"})
        if request.method == "DELETE":
            if self.objects.pop(key, None) is None:
                return httpx.Response(404, json={"message": "Object not found"})
            return httpx.Response(200, json={"message": "Successfully deleted"})
        return httpx.Response(405)

    def public_url(self, key: str) -> str:
        return f"{STORAGE_URL}/storage/v1/object/public/{BUCKET}/{key}"


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
def verifier():
    return TokenVerifier(secret_key="test-secret")


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def storage(fake_storage):
    return StorageClient(
        base_url=STORAGE_URL,
        service_key="service-key",
        bucket=BUCKET,
        transport=httpx.MockTransport(fake_storage.handler),
        retry_delay=0,
    )


@pytest.fixture
def make_user(db, verifier):
    """Insert a user directly and return ``(user_id, token)``."""

    def _make(name: str):
        user = User(name=name, email=f"{name}@example.com", password_hash="unused")
        db.add(user)
        db.commit()
        return user.id, verifier.create_access_token({"sub": user.id, "email": user.email})

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def demo_service(db, verifier, storage):
    return DemoService(db, verifier, storage)


@pytest.fixture
def step_service(db, verifier, storage):
    return StepService(db, verifier, storage)


@pytest.fixture
def hotspot_service(db, verifier):
    return HotspotService(db, verifier)


@pytest.fixture
def upload_service(db, verifier, storage):
    return UploadService(db, storage, verifier, max_bytes=1024)


@pytest.fixture
def client(db, verifier, storage):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_token_verifier] = lambda: verifier
    app.dependency_overrides[get_storage_client] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
