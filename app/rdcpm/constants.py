"""
Central constants for the RDC project management application.
"""
from __future__ import annotations

PROJECT_STATUSES = ("planning", "active", "on_hold", "completed", "cancelled")
PRIORITIES = ("low", "medium", "high", "urgent")
PROJECT_CATEGORIES = ("infrastructure", "technology", "education", "agriculture", "environment", "health", "other")

SCHEDULE_STATUSES = ("pending", "active", "completed", "on_hold", "cancelled")
TASK_STATUSES = ("pending", "in_progress", "completed", "cancelled")

PROJECT_CODE_PREFIX = "RDC"

NOTICE_CATEGORIES = ("general", "project_update", "public_meeting", "emergency", "maintenance")
# Public notice lists put urgent notices first.
NOTICE_PRIORITY_ORDER = {"urgent": 1, "high": 2, "medium": 3, "low": 4}

SECTION_TYPES = (
    "about",
    "contact",
    "services",
    "statistics",
    "location",
    "demographics",
    "history",
    "leadership",
    "custom",
)

# Role key -> permission keys. Seeded by scripts/init_db.py.
ROLE_PERMISSIONS = {
    "admin": (
        "projects.view",
        "projects.view_all",
        "projects.create",
        "projects.edit",
        "projects.delete",
        "projects.export",
        "schedules.view",
        "schedules.edit",
        "dashboard.view",
        "assistant.use",
        "audit.view",
        "regions.manage",
    ),
    "manager": (
        "projects.view",
        "projects.create",
        "projects.edit",
        "projects.delete",
        "projects.export",
        "schedules.view",
        "schedules.edit",
        "dashboard.view",
        "assistant.use",
        "regions.manage",
    ),
    "user": (
        "projects.view",
        "projects.create",
        "projects.edit",
        "schedules.view",
        "schedules.edit",
        "dashboard.view",
        "assistant.use",
    ),
}

ROLE_NAMES = {"admin": "Administrator", "manager": "Project Manager", "user": "User"}

PERMISSION_NAMES = {
    "projects.view": "Projects: view",
    "projects.view_all": "Projects: view all",
    "projects.create": "Projects: create",
    "projects.edit": "Projects: edit",
    "projects.delete": "Projects: delete",
    "projects.export": "Projects: export",
    "schedules.view": "Schedules: view",
    "schedules.edit": "Schedules: edit",
    "dashboard.view": "Dashboard: view",
    "assistant.use": "Assistant: use",
    "audit.view": "Audit: view",
    "regions.manage": "Regions: manage notices and content",
}
