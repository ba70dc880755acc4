from datetime import date

import pytest
from openpyxl import Workbook
from sqlalchemy import create_engine, inspect

from app.rdcpm.models import AuditEvent, Base, User
from app.rdcpm.modules.projects.models import Project
from app.rdcpm.modules.schedules.models import Schedule, Task
from scripts import import_projects, init_db, release, start
from scripts._db_utils import script_session


@pytest.fixture()
def db_url(tmp_path, monkeypatch):
    for k in ("ADMIN_USERNAME", "ADMIN_EMAIL", "ADMIN_PASSWORD", "SEED_SAMPLE_DATA", "ENV"):
        monkeypatch.delenv(k, raising=False)
    url = f"sqlite:///{tmp_path/'scripts.db'}"
    engine = create_engine(url)
    Base.metadata.create_all(bind=engine)
    engine.dispose()
    return url


def test_seed_only_is_idempotent(db_url):
    init_db.seed_only(database_url=db_url)
    init_db.seed_only(database_url=db_url)
    with script_session(db_url) as s:
        admin = s.query(User).filter(User.username == "admin").one()
        assert [r.key for r in admin.roles] == ["admin"]
        assert s.query(Project).count() == 0


def test_seed_samples_builds_school_schedule(db_url):
    init_db.seed_only(database_url=db_url, with_samples=True)
    init_db.seed_only(database_url=db_url, with_samples=True)
    with script_session(db_url) as s:
        assert [p.code for p in s.query(Project).order_by(Project.code)] == [
            "RDC-001", "RDC-002", "RDC-003", "RDC-004", "RDC-005",
        ]
        school = s.query(Project).filter(Project.code == "RDC-005").one()
        [schedule] = s.query(Schedule).filter(Schedule.project_id == school.id).all()
        assert schedule.name == "Main Construction Schedule"
        phases = s.query(Task).filter(Task.schedule_id == schedule.id, Task.parent_task_id.is_(None)).order_by(Task.start_date).all()
        assert [p.name for p in phases] == [
            "Phase 1: Planning & Design",
            "Phase 2: Procurement",
            "Phase 3: Construction",
            "Phase 4: Completion",
        ]
        assert s.query(Task).filter(Task.parent_task_id == phases[2].id).count() == 4


def _workbook(path, rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)
    return str(path)


def test_map_headers_accepts_aliases():
    col_map = import_projects.map_headers(["Project Code", "Project Name", None, "Budget", "Location"])
    assert col_map == {"code": 0, "name": 1, "budget_allocated": 3, "region": 4}


def test_row_to_fields_normalizes_values():
    col_map = {"name": 0, "status": 1, "priority": 2, "budget_allocated": 3, "start_date": 4, "currency": 5}
    fields = import_projects.row_to_fields(("Bridge", "On Hold", "URGENT", "$1,250.50", "15/03/2025", "gyd"), col_map)
    assert fields["status"] == "on_hold"
    assert fields["priority"] == "urgent"
    assert fields["budget_allocated"] == 1250.5
    assert fields["start_date"] == date(2025, 3, 15)
    assert fields["currency"] == "GYD"

    fields = import_projects.row_to_fields(("Bridge", "unknown", None, "n/a", None, None), col_map)
    assert (fields["status"], fields["priority"], fields["budget_allocated"], fields["currency"]) == ("planning", "medium", None, "USD")


def test_import_projects_from_excel(db_url, tmp_path):
    init_db.seed_only(database_url=db_url)
    path = _workbook(
        tmp_path / "projects.xlsx",
        [
            ["Code", "Project Name", "Status", "Budget", "Spent", "Start Date", "End Date", "Region"],
            ["RDC-010", "Bartica Market", "active", 150000, 20000, "2025-01-01", "2025-06-30", "Bartica"],
            [None, "Parika Jetty", "planning", "75,000", None, None, None, "Parika"],
            [None, None, "active", 1000, None, None, None, "Unnamed"],
            [None, "Backwards", None, None, None, "2025-06-01", "2025-01-01", None],
        ],
    )
    with script_session(db_url) as s:
        admin = s.query(User).filter(User.username == "admin").one()
        result = import_projects.import_projects_from_excel(path, s, admin)
    assert result["created"] == 2
    assert result["skipped"] == 1
    assert result["errors"] == ["Row 5: end date before start date"]

    with script_session(db_url) as s:
        codes = {p.code: p for p in s.query(Project).all()}
        assert set(codes) == {"RDC-010", "RDC-011"}
        assert codes["RDC-011"].name == "Parika Jetty"
        assert float(codes["RDC-011"].budget_allocated) == 75000
        assert s.query(AuditEvent).filter(AuditEvent.action == "project.import").count() == 2

    with script_session(db_url) as s:
        admin = s.query(User).filter(User.username == "admin").one()
        again = import_projects.import_projects_from_excel(path, s, admin)
    assert again["created"] == 1  # rows without a code are always new


def test_import_missing_file(db_url):
    with script_session(db_url) as s:
        assert "error" in import_projects.import_projects_from_excel("/nope/missing.xlsx", s, None)


def test_validate_port():
    assert start.validate_port(None) == "8080"
    assert start.validate_port(" 5000 ") == "5000"
    with pytest.raises(ValueError):
        start.validate_port("http")
    with pytest.raises(ValueError):
        start.validate_port("70000")


def test_gunicorn_argv(monkeypatch):
    monkeypatch.setenv("WEB_CONCURRENCY", "4")
    argv = start.gunicorn_argv("9000")
    assert argv[:2] == ["gunicorn", "app.wsgi:app"]
    assert argv[argv.index("--bind") + 1] == "0.0.0.0:9000"
    assert argv[argv.index("--workers") + 1] == "4"


def test_release_requires_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        release.run_release()


def test_release_refuses_sqlite_in_production(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///prod.db")
    monkeypatch.setenv("ENV", "production")
    with pytest.raises(RuntimeError, match="sqlite"):
        release.run_release()


def test_release_migrates_and_seeds(tmp_path, monkeypatch):
    for k in ("ADMIN_USERNAME", "ADMIN_EMAIL", "ADMIN_PASSWORD", "ENV"):
        monkeypatch.delenv(k, raising=False)
    url = f"sqlite:///{tmp_path/'release.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("SEED_SAMPLE_DATA", "1")
    release.run_release()

    engine = create_engine(url)
    tables = set(inspect(engine).get_table_names())
    engine.dispose()
    assert {"users", "projects", "schedules", "tasks", "audit_events", "ai_conversations", "region_notices", "region_content_sections", "alembic_version"} <= tables
    with script_session(url) as s:
        assert s.query(User).filter(User.username == "admin").count() == 1
        assert s.query(Project).count() == 5
