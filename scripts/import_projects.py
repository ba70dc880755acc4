#!/usr/bin/env python3
"""
Import projects from an Excel sheet.

Usage:
    python scripts/import_projects.py "RDC Projects.xlsx"

The first row is the header. Rows are matched on project code, so re-running
the import updates nothing and only creates projects whose code is new.
Rows without a code get the next free RDC-NNN code.
"""
from __future__ import annotations

import os
import sys
from datetime import date, datetime
from pathlib import Path

# Ensure repo root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from openpyxl import load_workbook
from sqlalchemy.orm import Session

from app.rdcpm.audit import record_event
from app.rdcpm.constants import PRIORITIES, PROJECT_STATUSES
from app.rdcpm.models import User
from app.rdcpm.modules.projects.models import Project
from app.rdcpm.modules.projects.service import next_project_code
from scripts._db_utils import script_session

HEADER_MAPPINGS = {
    "code": ["code", "project code", "project id", "id"],
    "name": ["name", "project name", "project", "title"],
    "description": ["description", "desc", "summary"],
    "category": ["category", "type", "sector"],
    "status": ["status"],
    "priority": ["priority"],
    "budget_allocated": ["budget", "budget allocated", "budget_allocated", "allocated"],
    "budget_spent": ["spent", "budget spent", "budget_spent", "expenditure"],
    "currency": ["currency"],
    "start_date": ["start", "start date", "start_date"],
    "end_date": ["end", "end date", "end_date", "completion date"],
    "region": ["region", "location", "area"],
}


def _normalize_text(s) -> str:
    return ("" if s is None else str(s)).strip()


def _parse_date(val) -> date | None:
    """Excel date cell or a string date."""
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()
    if not s:
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y", "%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def _parse_money(val) -> float | None:
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        return float(val)
    s = str(val).strip().replace(",", "").lstrip("$")
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def map_headers(headers: list) -> dict[str, int]:
    col_map: dict[str, int] = {}
    for i, h in enumerate(headers):
        if h is None:
            continue
        h_lower = str(h).strip().lower()
        for field, options in HEADER_MAPPINGS.items():
            if field not in col_map and h_lower in options:
                col_map[field] = i
                break
    return col_map


def row_to_fields(row: tuple, col_map: dict[str, int]) -> dict:
    def get_val(field):
        idx = col_map.get(field)
        return row[idx] if idx is not None and idx < len(row) else None

    status = _normalize_text(get_val("status")).lower().replace(" ", "_")
    priority = _normalize_text(get_val("priority")).lower()
    currency = _normalize_text(get_val("currency")).upper()
    return {
        "code": _normalize_text(get_val("code")).upper() or None,
        "name": _normalize_text(get_val("name")),
        "description": _normalize_text(get_val("description")) or None,
        "category": _normalize_text(get_val("category")).lower() or None,
        "status": status if status in PROJECT_STATUSES else "planning",
        "priority": priority if priority in PRIORITIES else "medium",
        "budget_allocated": _parse_money(get_val("budget_allocated")),
        "budget_spent": _parse_money(get_val("budget_spent")) or 0,
        "currency": currency if len(currency) == 3 else "USD",
        "start_date": _parse_date(get_val("start_date")),
        "end_date": _parse_date(get_val("end_date")),
        "region": _normalize_text(get_val("region")) or None,
    }


def import_projects_from_excel(filepath: str, s: Session, user: User) -> dict:
    if not os.path.exists(filepath):
        return {"error": f"File not found: {filepath}"}

    wb = load_workbook(filepath, data_only=True, read_only=True)
    ws = wb.active
    rows = ws.iter_rows(values_only=True)
    headers = list(next(rows, None) or [])
    col_map = map_headers(headers)
    if "name" not in col_map:
        return {"error": "No project name column found in the header row."}

    created = 0
    skipped = 0
    errors = []
    for row_num, row in enumerate(rows, start=2):
        fields = row_to_fields(row, col_map)
        if not fields["name"]:
            skipped += 1
            continue
        if fields["start_date"] and fields["end_date"] and fields["end_date"] < fields["start_date"]:
            errors.append(f"Row {row_num}: end date before start date")
            continue
        if fields["code"] and s.query(Project).filter(Project.code == fields["code"]).one_or_none():
            skipped += 1
            continue
        code = fields.pop("code") or next_project_code(s)
        project = Project(code=code, owner_user_id=user.id, project_manager_id=user.id, **fields)
        s.add(project)
        s.flush()
        record_event(
            s,
            actor=user,
            action="project.import",
            entity_type="Project",
            entity_id=str(project.id),
            metadata={"code": code, "row": row_num, "file": os.path.basename(filepath)},
        )
        created += 1
    wb.close()
    return {"created": created, "skipped": skipped, "errors": errors}


def main():
    database_url = os.environ.get("DATABASE_URL") or "sqlite:///rdcpm.db"
    admin_username = (os.environ.get("ADMIN_USERNAME") or "admin").strip()
    filepath = sys.argv[1] if len(sys.argv) > 1 else "RDC Projects.xlsx"

    with script_session(database_url) as s:
        admin_user = s.query(User).filter(User.username == admin_username).one_or_none()
        if not admin_user:
            print(f"ERROR: Admin user '{admin_username}' not found. Run scripts/init_db.py first.")
            return

        print(f"Importing projects from: {filepath}")
        result = import_projects_from_excel(filepath, s, admin_user)
        if "error" in result:
            print(f"  ERROR: {result['error']}")
            return
        print(f"  Projects: created={result['created']}, skipped={result['skipped']}")
        for err in result["errors"][:5]:
            print(f"    {err}")
    print("\nImport complete. Changes committed.")


if __name__ == "__main__":
    main()
