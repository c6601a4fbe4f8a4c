"""
Formatting Tools
================
Markdown builders for printing planned work orders.
"""

from models.work_order import WorkOrder

PRIORITY_ICONS = {
    "critical": "🔴",
    "high": "🟠",
    "medium": "🟡",
    "low": "🟢",
}

STATUS_ICONS = {
    "open": "🟡",
    "assigned": "🔵",
    "in_progress": "🟠",
    "waiting_parts": "🔴",
    "completed": "🟢",
    "cancelled": "⚫",
}


def _hours(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    if not hours:
        return f"{rest} min"
    return f"{hours} h {rest} min" if rest else f"{hours} h"


def format_work_order_card(work_order: WorkOrder) -> str:
    """Build a rich markdown work order card for display."""
    priority_icon = PRIORITY_ICONS.get(work_order.priority, "⚪")
    status_icon = STATUS_ICONS.get(work_order.status, "⚪")

    card = f"""### Work Order: {work_order.work_order_number or 'N/A'}

| Field | Details |
|-------|---------|
| **Title** | {work_order.title or 'N/A'} |
| **Machine** | {work_order.machine_id or 'N/A'} |
| **Type** | {work_order.type.title()} |
| **Priority** | {priority_icon} {work_order.priority.upper()} |
| **Status** | {status_icon} {work_order.status.replace('_', ' ').title()} |
| **Technician** | {work_order.assigned_to or 'Unassigned'} |
| **Est. Duration** | {_hours(work_order.estimated_duration)} |

**Description:**
{work_order.description or 'No description provided.'}
"""

    if work_order.parts_used:
        card += "\n**Required Parts:**\n\n"
        card += "| Part # | Part ID | Qty |\n"
        card += "|--------|---------|-----|\n"
        for p in work_order.parts_used:
            card += f"| {p.part_number} | {p.part_id or 'N/A'} | {p.quantity} |\n"

    if work_order.tasks:
        card += "\n**Tasks:**\n\n"
        card += "| # | Task | Duration | Skills |\n"
        card += "|---|------|----------|--------|\n"
        for t in work_order.tasks:
            skills = ", ".join(t.required_skills) or "-"
            card += f"| {t.sequence} | {t.title} | {_hours(t.estimated_duration_minutes)} | {skills} |\n"

        safety = [t for t in work_order.tasks if t.safety_notes]
        if safety:
            card += "\n**Safety Notes:**\n"
            for t in safety:
                card += f"- ⚠️ Step {t.sequence}: {t.safety_notes}\n"

    if work_order.notes:
        card += f"\n**Notes:**\n{work_order.notes}\n"

    return card
