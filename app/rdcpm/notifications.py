from __future__ import annotations

import json
import logging
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from app.rdcpm.audit import record_event

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from app.rdcpm.models import User
    from app.rdcpm.modules.projects.models import Project

logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    pass


@dataclass(frozen=True)
class WebhookNotifier:
    url: str
    timeout_seconds: int = 10
    retries: int = 2
    backoff_seconds: float = 1.0

    def post_json(self, body: dict[str, Any]) -> int:
        data = json.dumps(body, default=str).encode("utf-8")
        last_err: Exception | None = None
        for attempt in range(self.retries + 1):
            try:
                req = urllib.request.Request(self.url, data=data, method="POST")
                req.add_header("Content-Type", "application/json")
                req.add_header("Accept", "application/json")
                with urllib.request.urlopen(req, timeout=self.timeout_seconds) as resp:
                    return int(resp.status)
            except urllib.error.HTTPError as e:
                if e.code < 500:
                    raise NotificationError(f"HTTP {e.code} from webhook") from e
                last_err = e
            except (urllib.error.URLError, OSError) as e:
                last_err = e
            if attempt < self.retries:
                time.sleep(self.backoff_seconds * (attempt + 1))
        raise NotificationError(f"Webhook request failed after retries: {last_err}")


def notifier_from_config(config: dict) -> WebhookNotifier | None:
    url = str(config.get("NOTIFY_WEBHOOK_URL") or "").strip()
    if not url:
        return None
    return WebhookNotifier(url=url)


def budget_alert_threshold(config: dict) -> float:
    value = config.get("BUDGET_ALERT_THRESHOLD")
    return 0.9 if value is None else float(value)


def budget_ratio(allocated: float | None, spent: float | None) -> float | None:
    if not allocated or allocated <= 0:
        return None
    return float(spent or 0) / float(allocated)


def crossed_threshold(old_ratio: float | None, new_ratio: float | None, threshold: float) -> bool:
    """True only on the transition from below the threshold to at/above it."""
    if new_ratio is None or new_ratio < threshold:
        return False
    return old_ratio is None or old_ratio < threshold


def send_budget_alert(
    s: "Session",
    *,
    config: dict,
    project: "Project",
    user: "User | None",
    ratio: float,
) -> bool:
    """
    Post a budget alert for a project. Never raises; the outcome is audited.
    """
    notifier = notifier_from_config(config)
    if notifier is None:
        logger.info("Budget alert for %s skipped; NOTIFY_WEBHOOK_URL not set", project.code)
        return False

    body = {
        "alert": {
            "type": "budget_threshold",
            "projectId": project.id,
            "projectCode": project.code,
            "projectName": project.name,
            "budgetAllocated": float(project.budget_allocated or 0),
            "budgetSpent": float(project.budget_spent or 0),
            "utilization": round(ratio * 100, 1),
            "threshold": round(budget_alert_threshold(config) * 100, 1),
        },
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "source": "rdc-project-management",
    }
    try:
        status = notifier.post_json(body)
    except NotificationError as e:
        logger.warning("Budget alert for %s failed: %s", project.code, e)
        record_event(
            s,
            actor=user,
            action="notification.failed",
            entity_type="Project",
            entity_id=str(project.id),
            reason=str(e)[:500],
            metadata={"kind": "budget_alert"},
        )
        return False

    record_event(
        s,
        actor=user,
        action="notification.sent",
        entity_type="Project",
        entity_id=str(project.id),
        metadata={"kind": "budget_alert", "status": status, "utilization": body["alert"]["utilization"]},
    )
    return True
