import pytest
from werkzeug.security import generate_password_hash

from app.rdcpm import create_app
from app.rdcpm.auth import reset_rate_limits
from app.rdcpm.constants import PERMISSION_NAMES, ROLE_NAMES, ROLE_PERMISSIONS
from app.rdcpm.db import session_scope
from app.rdcpm.models import Base, Permission, Role, User

PASSWORD = "secret-pw"

# username -> role key
TEST_USERS = {
    "admin": "admin",
    "manager": "manager",
    "alice": "user",
    "bob": "user",
}


def _seed_rbac(s) -> dict[str, Role]:
    perms = {key: Permission(key=key, name=name) for key, name in PERMISSION_NAMES.items()}
    s.add_all(perms.values())
    roles = {}
    for role_key, perm_keys in ROLE_PERMISSIONS.items():
        r = Role(key=role_key, name=ROLE_NAMES[role_key])
        for key in perm_keys:
            r.permissions.append(perms[key])
        s.add(r)
        roles[role_key] = r
    return roles


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'test.db'}")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("AI_ENABLED", "true")
    monkeypatch.setenv("CORS_ORIGIN", "http://localhost:5173")
    for k in ("NOTIFY_WEBHOOK_URL", "BUDGET_ALERT_THRESHOLD", "JWT_SECRET", "JWT_REFRESH_SECRET", "APP_VERSION"):
        monkeypatch.delenv(k, raising=False)
    reset_rate_limits()

    app = create_app()
    engine = app.extensions["sqlalchemy_engine"]
    Base.metadata.create_all(bind=engine)

    with session_scope(app) as s:
        roles = _seed_rbac(s)
        for username, role_key in TEST_USERS.items():
            u = User(
                username=username,
                email=f"{username}@example.com",
                full_name=username.title(),
                password_hash=generate_password_hash(PASSWORD),
                is_active=True,
            )
            u.roles.append(roles[role_key])
            s.add(u)

    yield app
    reset_rate_limits()


@pytest.fixture()
def client(app):
    return app.test_client()


def login(client, username: str = "admin", password: str = PASSWORD):
    r = client.post("/api/v1/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.json
    return r


@pytest.fixture()
def admin_client(client):
    login(client, "admin")
    return client


def user_id(app, username: str) -> int:
    with session_scope(app) as s:
        return s.query(User).filter(User.username == username).one().id
