import sys
from datetime import date
from pathlib import Path
import os

from werkzeug.security import generate_password_hash

# Ensure repo root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.rdcpm.constants import PERMISSION_NAMES, ROLE_NAMES, ROLE_PERMISSIONS
from app.rdcpm.models import Permission, Role, User
from app.rdcpm.modules.projects.models import Project
from app.rdcpm.modules.schedules.models import Schedule, Task
from scripts._db_utils import script_session

SAMPLE_PROJECTS = [
    {
        "code": "RDC-001",
        "name": "Anna Regina Infrastructure Development",
        "description": "Road rehabilitation, drainage and public building upgrades in Anna Regina.",
        "category": "infrastructure",
        "status": "active",
        "priority": "high",
        "budget_allocated": 5000000,
        "budget_spent": 1750000,
        "start_date": date(2024, 1, 15),
        "end_date": date(2025, 12, 31),
        "region": "Anna Regina",
    },
    {
        "code": "RDC-002",
        "name": "Georgetown Smart City Initiative",
        "description": "Connected street lighting, traffic sensors and an open data portal.",
        "category": "technology",
        "status": "planning",
        "priority": "high",
        "budget_allocated": 8000000,
        "budget_spent": 1200000,
        "start_date": date(2024, 3, 1),
        "end_date": date(2026, 6, 30),
        "region": "Georgetown",
    },
    {
        "code": "RDC-003",
        "name": "Berbice Agricultural Modernization",
        "description": "Irrigation upgrades and farmer training programmes across Berbice.",
        "category": "agriculture",
        "status": "active",
        "priority": "medium",
        "budget_allocated": 3000000,
        "budget_spent": 840000,
        "start_date": date(2024, 1, 1),
        "end_date": date(2025, 8, 31),
        "region": "Berbice",
    },
    {
        "code": "RDC-004",
        "name": "Essequibo Coastal Protection",
        "description": "Sea defence reinforcement and mangrove restoration along the Essequibo coast.",
        "category": "environment",
        "status": "planning",
        "priority": "high",
        "budget_allocated": 4500000,
        "budget_spent": 225000,
        "start_date": date(2024, 4, 1),
        "end_date": date(2026, 3, 31),
        "region": "Essequibo",
    },
    {
        "code": "RDC-005",
        "name": "Dartmouth Essequibo School Construction",
        "description": "Design and construction of a new primary school in Dartmouth, Essequibo.",
        "category": "education",
        "status": "planning",
        "priority": "high",
        "budget_allocated": 2500000,
        "budget_spent": 0,
        "start_date": date(2024, 6, 1),
        "end_date": date(2025, 12, 31),
        "region": "Essequibo",
    },
]

# (name, description, status, priority, start, end, progress, subtasks)
DARTMOUTH_PHASES = [
    ("Phase 1: Planning & Design", "Initial planning and architectural design phase", "completed", "high",
     date(2024, 6, 1), date(2024, 8, 30), 100, [
         ("Project Initiation", "Project charter and stakeholder identification", "completed", "high",
          date(2024, 6, 1), date(2024, 6, 15), 100),
         ("Site Analysis & Survey", "Topographical survey and soil testing", "completed", "high",
          date(2024, 6, 16), date(2024, 7, 15), 100),
         ("Architectural Drawings", "Detailed architectural plans and blueprints", "completed", "high",
          date(2024, 7, 16), date(2024, 8, 30), 100),
     ]),
    ("Phase 2: Procurement", "Sourcing materials and contractor selection", "in_progress", "high",
     date(2024, 9, 1), date(2024, 10, 31), 60, [
         ("Tender Process", "Publishing tenders and evaluating bids", "completed", "high",
          date(2024, 9, 1), date(2024, 9, 30), 100),
         ("Material Procurement", "Ordering steel, cement, and other core materials", "in_progress", "medium",
          date(2024, 10, 1), date(2024, 10, 31), 40),
     ]),
    ("Phase 3: Construction", "Main construction activities", "pending", "urgent",
     date(2024, 11, 1), date(2025, 10, 31), 0, [
         ("Foundation Work", "Excavation and foundation laying", "pending", "urgent",
          date(2024, 11, 1), date(2025, 1, 31), 0),
         ("Structural Framework", "Erecting columns, beams, and slabs", "pending", "high",
          date(2025, 2, 1), date(2025, 5, 31), 0),
         ("Roofing & Cladding", "Installation of roof and external walls", "pending", "medium",
          date(2025, 6, 1), date(2025, 8, 31), 0),
         ("Interior Finishing", "Flooring, painting, and fixtures", "pending", "medium",
          date(2025, 9, 1), date(2025, 10, 31), 0),
     ]),
    ("Phase 4: Completion", "Final inspection and handover", "pending", "high",
     date(2025, 11, 1), date(2025, 12, 31), 0, [
         ("Quality Inspection", "Final quality checks and snag list", "pending", "high",
          date(2025, 11, 1), date(2025, 11, 30), 0),
         ("Project Handover", "Final documentation and key handover", "pending", "high",
          date(2025, 12, 1), date(2025, 12, 31), 0),
     ]),
]


def seed_rbac(s) -> dict[str, Role]:
    """Permissions and roles from constants; safe to re-run."""
    perms: dict[str, Permission] = {}
    for key, name in PERMISSION_NAMES.items():
        p = s.query(Permission).filter(Permission.key == key).one_or_none()
        if not p:
            p = Permission(key=key, name=name)
            s.add(p)
        perms[key] = p

    roles: dict[str, Role] = {}
    for role_key, perm_keys in ROLE_PERMISSIONS.items():
        role = s.query(Role).filter(Role.key == role_key).one_or_none()
        if not role:
            role = Role(key=role_key, name=ROLE_NAMES[role_key])
            s.add(role)
        for key in perm_keys:
            if perms[key] not in role.permissions:
                role.permissions.append(perms[key])
        roles[role_key] = role
    return roles


def seed_sample_projects(s, owner: User) -> int:
    created = 0
    for data in SAMPLE_PROJECTS:
        if s.query(Project).filter(Project.code == data["code"]).one_or_none():
            continue
        s.add(Project(owner_user_id=owner.id, project_manager_id=owner.id, currency="USD", **data))
        created += 1
    s.flush()

    school = s.query(Project).filter(Project.code == "RDC-005").one()
    if not s.query(Schedule).filter(Schedule.project_id == school.id).first():
        schedule = Schedule(
            project_id=school.id,
            name="Main Construction Schedule",
            description="Primary construction timeline for Dartmouth School",
            start_date=date(2024, 6, 1),
            end_date=date(2025, 12, 31),
            status="active",
            created_by_user_id=owner.id,
        )
        s.add(schedule)
        s.flush()
        for name, desc, status, priority, start, end, progress, subtasks in DARTMOUTH_PHASES:
            phase = Task(
                schedule_id=schedule.id, name=name, description=desc, status=status, priority=priority,
                start_date=start, end_date=end, due_date=end, progress_percentage=progress,
                created_by_user_id=owner.id,
            )
            s.add(phase)
            s.flush()
            for sub_name, sub_desc, sub_status, sub_priority, sub_start, sub_end, sub_progress in subtasks:
                s.add(
                    Task(
                        schedule_id=schedule.id, parent_task_id=phase.id, name=sub_name, description=sub_desc,
                        status=sub_status, priority=sub_priority, start_date=sub_start, end_date=sub_end,
                        due_date=sub_end, progress_percentage=sub_progress, created_by_user_id=owner.id,
                    )
                )
    return created


def seed_only(*, database_url: str | None = None, with_samples: bool = False) -> None:
    """
    Seed permissions/roles/admin user in an idempotent way.
    Does NOT overwrite an existing admin user's password.
    """
    admin_username = (os.environ.get("ADMIN_USERNAME") or "admin").strip()
    admin_email = (os.environ.get("ADMIN_EMAIL") or "admin@rdc.local").strip().lower()
    admin_password = os.environ.get("ADMIN_PASSWORD") or "change-me"

    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///rdcpm.db").strip()

    with script_session(db_url) as s:
        roles = seed_rbac(s)

        user = s.query(User).filter(User.username == admin_username).one_or_none()
        if not user:
            user = User(
                username=admin_username,
                email=admin_email,
                full_name="System Administrator",
                password_hash=generate_password_hash(admin_password),
                is_active=True,
            )
            s.add(user)
        if roles["admin"] not in user.roles:
            user.roles.append(roles["admin"])
        s.flush()

        created = seed_sample_projects(s, user) if with_samples else 0

    print("Initialized database (seed_only).")
    print(f"Admin username: {admin_username}")
    print("Admin password: (from ADMIN_PASSWORD)")
    if with_samples:
        print(f"Sample projects created: {created}")


def main() -> None:
    seed_only(database_url=None, with_samples=True)


if __name__ == "__main__":
    main()
