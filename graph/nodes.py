"""
Graph Nodes
============
One node per planning stage. Each node reads what it needs from the state
and returns only the keys it produces. The planning agent handle is passed
through config["configurable"]["planner"].
"""

import asyncio
import logging

from langchain_core.runnables import RunnableConfig

from agents.repair_planner import RepairPlannerAgent, plan_work_order
from graph.state import RepairPlanningState
from services.fault_mapping import required_parts, required_skills
from tools.db_tools import create_work_order, get_available_technicians, get_parts_inventory

logger = logging.getLogger(__name__)


def _get_planner(config: RunnableConfig) -> RepairPlannerAgent:
    planner = (config or {}).get("configurable", {}).get("planner")
    if planner is None:
        raise ValueError("No planner in config['configurable']['planner']")
    return planner


async def map_fault_node(state: RepairPlanningState) -> dict:
    """Look up the skills and parts the fault type needs."""
    fault = state["fault"]
    skills = required_skills(fault.fault_type)
    parts = required_parts(fault.fault_type)
    logger.info(f"Fault {fault.fault_type} requires {len(skills)} skills and {len(parts)} parts")
    return {"required_skills": skills, "required_parts": parts}


async def gather_resources_node(state: RepairPlanningState) -> dict:
    """Query technicians and parts; the two lookups are independent."""
    technicians, parts = await asyncio.gather(
        get_available_technicians.ainvoke({"required_skills": state["required_skills"]}),
        get_parts_inventory.ainvoke({"part_numbers": state["required_parts"]}),
    )
    return {"technicians": technicians, "parts": parts}


async def plan_work_order_node(state: RepairPlanningState, config: RunnableConfig) -> dict:
    """Ask the planning agent for a work order and reconcile it."""
    work_order = await plan_work_order(
        _get_planner(config),
        state["fault"],
        state["required_skills"],
        state["required_parts"],
        state["technicians"],
        state["parts"],
    )
    return {"work_order": work_order}


async def save_work_order_node(state: RepairPlanningState) -> dict:
    """Persist the reconciled work order."""
    saved = await create_work_order.ainvoke({"work_order": state["work_order"].to_document()})
    logger.info(f"Work order {saved.work_order_number} saved with id {saved.id}")
    return {"saved_work_order": saved}
