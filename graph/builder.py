"""
Graph Builder
=============
Constructs the repair planning StateGraph and runs a fault through it.
"""

import logging

from langgraph.graph import StateGraph, START, END

from agents.repair_planner import RepairPlannerAgent
from graph.state import RepairPlanningState
from graph.nodes import (
    map_fault_node,
    gather_resources_node,
    plan_work_order_node,
    save_work_order_node,
)
from models.work_order import DiagnosedFault, WorkOrder

logger = logging.getLogger(__name__)


def build_graph() -> StateGraph:
    """
    Build the repair planning StateGraph (uncompiled).

    Graph topology (linear; any node failure aborts the run):
        START -> map_fault -> gather_resources -> plan_work_order
              -> save_work_order -> END
    """
    graph = StateGraph(RepairPlanningState)

    # ---- Add Nodes ----
    graph.add_node("map_fault", map_fault_node)
    graph.add_node("gather_resources", gather_resources_node)
    graph.add_node("plan_work_order", plan_work_order_node)
    graph.add_node("save_work_order", save_work_order_node)

    # ---- Edges ----
    graph.add_edge(START, "map_fault")
    graph.add_edge("map_fault", "gather_resources")
    graph.add_edge("gather_resources", "plan_work_order")
    graph.add_edge("plan_work_order", "save_work_order")
    graph.add_edge("save_work_order", END)

    return graph


def compile_graph():
    """Compile the graph. No checkpointer: a planning run is not resumable."""
    compiled = build_graph().compile()
    logger.info("Repair planning graph compiled successfully")
    return compiled


async def run_repair_planning(
    graph, fault: DiagnosedFault, planner: RepairPlannerAgent
) -> WorkOrder:
    """Run one fault through the compiled graph and return the stored work order."""
    result = await graph.ainvoke(
        {"fault": fault},
        config={"configurable": {"planner": planner}},
    )
    return result["saved_work_order"]
