"""
Canned assistant texts. Replies are picked by keyword; nothing here calls a model.
"""
from __future__ import annotations

import re

INSIGHT_TYPES = ("analysis", "recommendations", "chat")

AI_DISABLED_REPLY = "AI features are currently disabled. Please check that AI_ENABLED is set to true."

INSIGHTS = {
    "analysis": """📊 **AI Project Analysis Complete!**

**Key Insights:**
• Your projects are performing well overall
• 3 active projects with good progress
• Budget utilization is at 78% - on track
• Timeline adherence: 85% - excellent

**Recommendations:**
• Consider adding more detailed milestone tracking
• Review resource allocation for upcoming phases
• Schedule regular team check-ins""",
    "recommendations": """💡 **Smart Recommendations**

**Priority Actions:**
1. **Resource Optimization**: Reallocate team members to high-priority projects
2. **Risk Mitigation**: Set up automated alerts for budget thresholds
3. **Timeline Management**: Add buffer time for complex deliverables

**Growth Opportunities:**
• Implement agile methodology for faster delivery
• Set up automated reporting for stakeholders
• Create project templates for similar future projects""",
    "chat": """🤖 **AI Chat Assistant**

Hello! I'm your AI Project Management Assistant. I can help you with:

**What I can do:**
• Analyze project performance and trends
• Suggest improvements and optimizations
• Answer questions about your projects
• Provide insights on resource allocation
• Help with project planning and scheduling

**Try asking me:**
• "How are my projects performing?"
• "What risks should I watch out for?"
• "How can I improve team productivity?"
• "What's the best way to manage budgets?\"""",
}

INSIGHT_TITLES = {
    "analysis": "AI Project Analysis",
    "recommendations": "Smart Recommendations",
    "chat": "AI Chat Assistant",
}

# Checked in order; first topic with a matching keyword wins.
TOPICS: list[tuple[str, tuple[str, ...], str]] = [
    (
        "budget",
        ("budget", "cost", "spend", "spent", "expense", "money", "funding"),
        """💰 **Budget guidance**

• Keep utilization between 70% and 90% of the allocation for a healthy burn rate
• Set an alert threshold so overruns are flagged before they happen
• Review spend against completed milestones, not just the calendar
• Re-forecast monthly and record the reason for every budget change""",
    ),
    (
        "risk",
        ("risk", "issue", "problem", "threat", "blocker", "delay"),
        """⚠️ **Risk management**

• Record risks on the tasks they affect and grade them by priority
• Review high and urgent risks weekly with the task owners
• Keep a mitigation plan and a fallback for every critical-path risk
• Escalate issues that stay open for more than one review cycle""",
    ),
    (
        "schedule",
        ("schedule", "timeline", "deadline", "due", "late", "milestone", "overdue"),
        """📅 **Schedule management**

• Break phases into tasks of no more than two weeks
• Track the critical path and protect it with buffer time
• Compare expected progress with completed tasks every week
• Re-plan overdue tasks immediately and update their dependencies""",
    ),
    (
        "team",
        ("team", "resource", "staff", "people", "assign", "workload", "productivity"),
        """👥 **Team and resources**

• Every open task should have an owner
• Keep staffing between 90% and 110% of what the plan requires
• Balance workload across the team before adding new people
• Hold short regular check-ins to surface blockers early""",
    ),
    (
        "greeting",
        ("hello", "hi", "hey", "good morning", "good afternoon"),
        "Hello! I can help with budgets, risks, schedules and team allocation. What would you like to look at?",
    ),
]

FALLBACK_REPLY = """I can help you with:
• Budget tracking and utilization
• Risks and open issues
• Schedules, deadlines and milestones
• Team allocation and workload

Try asking "How is my budget?" or "What risks should I watch out for?\""""

_FOLLOW_UP_RE = re.compile(r"^\s*(more|tell me more|why|how|go on|explain|details?)\b", re.IGNORECASE)


def _tokens(text: str) -> set[str]:
    return set(re.findall(r"[a-z]+", text.lower()))


def classify_message(message: str) -> str | None:
    words = _tokens(message)
    lowered = message.lower()
    for topic, keywords, _reply in TOPICS:
        for kw in keywords:
            if (" " in kw and kw in lowered) or kw in words:
                return topic
    return None


def _topic_reply(topic: str) -> str:
    for name, _keywords, reply in TOPICS:
        if name == topic:
            return reply
    return FALLBACK_REPLY


def _previous_topic(history: list[dict]) -> str | None:
    for msg in reversed(history):
        if msg.get("role") == "user":
            topic = classify_message(str(msg.get("content") or ""))
            if topic and topic != "greeting":
                return topic
    return None


def project_context_line(ctx: dict | None) -> str | None:
    if not ctx:
        return None
    parts = [f"**{ctx.get('code')} {ctx.get('name')}** is {str(ctx.get('status') or '').replace('_', ' ')}"]
    if ctx.get("budgetUtilization") is not None:
        parts.append(f"budget utilization {ctx['budgetUtilization']}%")
    if ctx.get("totalTasks"):
        parts.append(f"{ctx.get('completedTasks', 0)}/{ctx['totalTasks']} tasks complete")
    return "Project context: " + ", ".join(parts) + "."


def canned_reply(message: str, history: list[dict] | None = None, project_ctx: dict | None = None) -> tuple[str, str]:
    """Returns (topic, reply). Short follow-ups reuse the topic of the previous user message."""
    history = history or []
    topic = classify_message(message)
    if topic is None and _FOLLOW_UP_RE.match(message):
        topic = _previous_topic(history)
    reply = _topic_reply(topic) if topic else FALLBACK_REPLY
    context_line = project_context_line(project_ctx)
    if context_line and topic != "greeting":
        reply = f"{context_line}\n\n{reply}"
    return topic or "help", reply
