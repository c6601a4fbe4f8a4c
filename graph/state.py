"""
Graph State Schema
==================
Defines the RepairPlanningState TypedDict - the state passed between the
nodes of the repair planning graph for a single fault.
"""

from typing import Optional

from typing_extensions import TypedDict

from models.work_order import DiagnosedFault, Part, Technician, WorkOrder


class RepairPlanningState(TypedDict, total=False):
    """
    State for one planning request. Nodes return partial updates.
    """

    # ---- Input ----
    fault: DiagnosedFault                       # The fault being planned for

    # ---- Requirements (from the fault mapping) ----
    required_skills: list[str]
    required_parts: list[str]

    # ---- Grounding data (from the database) ----
    technicians: list[Technician]               # Available, best match first
    parts: list[Part]                           # In-stock parts for this fault

    # ---- Output ----
    work_order: Optional[WorkOrder]             # Reconciled, not yet stored
    saved_work_order: Optional[WorkOrder]       # As returned by the store
