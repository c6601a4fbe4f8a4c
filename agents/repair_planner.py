"""
Repair Planner Agent
====================
Turns a diagnosed fault into a work order the store can accept.
- Builds a prompt grounded in the technicians and parts actually available
- Asks the planning agent for a JSON work order
- Parses the response into a draft WorkOrder
- Reconciles the draft against the grounded data: fills identifiers,
  replaces unknown assignees, drops unknown parts, orders tasks

The agent's output is never trusted as-is. Only reconcile_work_order()
turns a draft into something that goes to the database.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from openai import OpenAIError

from config.settings import AGENTS, MODELS, PREFIXES, WORK_ORDER_DEFAULTS
from config.prompts import REPAIR_PLANNER_INSTRUCTIONS, REPAIR_PLANNER_PROMPT
from models.work_order import (
    DiagnosedFault,
    Part,
    Technician,
    WorkOrder,
    WorkOrderParseError,
    parse_work_order_draft,
)
import services.llm_service as llm
from tools.db_tools import register_agent_version

logger = logging.getLogger(__name__)


class RepairPlannerAgent:
    """Handle on the versioned planning agent (name + model deployment + instructions)."""

    def __init__(
        self,
        name: str = AGENTS["repair_planner"]["name"],
        model: str = AGENTS["repair_planner"]["model"],
        instructions: str = REPAIR_PLANNER_INSTRUCTIONS,
    ):
        self.name = name
        self.model = model
        self.instructions = instructions
        self.version: Optional[int] = None

    async def ensure_version(self) -> int:
        """Register this agent definition once; an unchanged definition keeps its version."""
        row = await register_agent_version.ainvoke(
            {
                "agent_name": self.name,
                "model": self.model,
                "instructions": self.instructions,
            }
        )
        self.version = row["version"]
        logger.info(f"Ensured agent version {self.version} for {self.name} (model: {self.model})")
        return self.version

    async def run(self, prompt: str) -> str:
        """Send one prompt to the agent and return its raw text response."""
        if self.version is None:
            await self.ensure_version()

        try:
            response = await llm.chat(
                messages=[
                    {"role": "system", "content": self.instructions},
                    {"role": "user", "content": prompt},
                ],
                model=self.model,
                response_format={"type": "json_object"},
            )
        except OpenAIError:
            logger.exception(f"Planning agent {self.name} call failed")
            raise

        text = response["content"]
        limit = MODELS["response_snippet_chars"]
        snippet = text[:limit] + "..." if len(text) > limit else text
        logger.info(f"Agent response: {snippet}")
        return text


# ============================================================
# Prompt Assembly
# ============================================================


def _quoted(values: list[str]) -> str:
    return ", ".join(f'"{v}"' for v in values)


def build_repair_prompt(
    fault: DiagnosedFault,
    required_skills: list[str],
    required_parts: list[str],
    technicians: list[Technician],
    parts: list[Part],
) -> str:
    """Embed the fault, its requirements and the available resources into one prompt."""
    tech_summary = ", ".join(
        f'{{id: "{t.id}", name: "{t.name}", skills: [{_quoted(t.skills)}]}}'
        for t in technicians
    )
    part_summary = ", ".join(
        f'{{partNumber: "{p.part_number}", description: "{p.description}", qty: {p.quantity_available}}}'
        for p in parts
    )
    return REPAIR_PLANNER_PROMPT.format(
        instructions=REPAIR_PLANNER_INSTRUCTIONS,
        fault_type=fault.fault_type,
        machine_id=fault.machine_id,
        description=fault.description,
        required_skills=_quoted(required_skills),
        required_parts=_quoted(required_parts),
        technicians=tech_summary,
        parts=part_summary,
    )


# ============================================================
# Reconciliation
# ============================================================


def reconcile_work_order(
    draft: WorkOrder,
    fault: DiagnosedFault,
    technicians: list[Technician],
    parts: list[Part],
    now: Optional[datetime] = None,
) -> WorkOrder:
    """
    Make a draft work order consistent with the grounded data.

    Args:
        draft: Work order parsed from the agent response
        fault: The fault being planned for
        technicians: Available technicians, best match first
        parts: Parts in stock for this fault

    Returns:
        A new WorkOrder; the draft is not modified
    """
    now = now or datetime.now(timezone.utc)
    updates = {}

    # ---- Identifiers & defaults ----
    if not draft.id.strip():
        updates["id"] = str(uuid.uuid4())
    if not draft.work_order_number.strip():
        updates["work_order_number"] = f"{PREFIXES['work_order']}-{now:%Y%m%d%H%M%S}"
    if not draft.machine_id.strip():
        updates["machine_id"] = fault.machine_id
    if not draft.status.strip():
        updates["status"] = WORK_ORDER_DEFAULTS["status"]

    # ---- Technician assignment ----
    tech_ids = {t.id.lower(): t.id for t in technicians}
    best_match = technicians[0].id if technicians else None
    proposed = (draft.assigned_to or "").strip()
    if not proposed:
        updates["assigned_to"] = best_match
    elif proposed.lower() in tech_ids:
        updates["assigned_to"] = tech_ids[proposed.lower()]
    else:
        logger.warning(
            f"Assigned technician {proposed} not found among available technicians; "
            f"using {best_match or 'no one'}"
        )
        updates["assigned_to"] = best_match

    # ---- Parts ----
    stock = {p.part_number.lower(): p for p in parts}
    kept = []
    for usage in draft.parts_used:
        part = stock.get(usage.part_number.strip().lower())
        if part is None:
            continue
        kept.append(
            usage.model_copy(
                update={
                    "part_number": part.part_number,
                    "part_id": part.id,
                }
            )
        )
    dropped = len(draft.parts_used) - len(kept)
    if dropped:
        logger.info(f"Dropped {dropped} proposed parts that are not in stock")
    updates["parts_used"] = kept

    # ---- Tasks (stable: equal sequences keep agent order) ----
    updates["tasks"] = sorted(draft.tasks, key=lambda task: task.sequence)

    return draft.model_copy(update=updates)


# ============================================================
# Planning
# ============================================================


async def plan_work_order(
    agent: RepairPlannerAgent,
    fault: DiagnosedFault,
    required_skills: list[str],
    required_parts: list[str],
    technicians: list[Technician],
    parts: list[Part],
) -> WorkOrder:
    """Prompt the agent, parse its answer and reconcile it. Nothing is persisted here."""
    prompt = build_repair_prompt(fault, required_skills, required_parts, technicians, parts)
    text = await agent.run(prompt)

    try:
        draft = parse_work_order_draft(text)
    except WorkOrderParseError:
        logger.exception("Failed to parse agent response into WorkOrder JSON")
        raise

    work_order = reconcile_work_order(draft, fault, technicians, parts)
    logger.info(
        f"Planned work order {work_order.work_order_number}: {len(work_order.tasks)} tasks, "
        f"{len(work_order.parts_used)} parts, assigned to {work_order.assigned_to or 'nobody'}"
    )
    return work_order
