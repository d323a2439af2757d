import os
import tempfile

# must be set before budgetdash.core.config is imported
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SEED_ADMIN"] = "false"
_data_dir = tempfile.mkdtemp(prefix="budgetdash_")
os.environ["UPLOAD_DIR"] = os.path.join(_data_dir, "uploads")
os.environ["EXPORT_DIR"] = os.path.join(_data_dir, "exports")

import pytest
from fastapi.testclient import TestClient

import budgetdash.db.models  # noqa: F401
from budgetdash.core.deps import get_current_user, get_db, get_snapshot_db
from budgetdash.db.base import Base
from budgetdash.db.models.user import Role, User
from budgetdash.db.session import SessionLocal, engine
from budgetdash.main import app


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
def client(db):
    def _db():
        yield db

    def _user():
        return User(id=1, login="tester", role=Role.admin.value, is_active=True)

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_snapshot_db] = _db
    app.dependency_overrides[get_current_user] = _user
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
