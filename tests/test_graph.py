"""End-to-end tests of the planning graph against the fake database and LLM."""

import json

import openai
import psycopg
import pytest

from agents.repair_planner import RepairPlannerAgent
from graph.builder import build_graph, compile_graph, run_repair_planning
from models.work_order import DiagnosedFault, WorkOrderParseError


@pytest.fixture
def fault():
    return DiagnosedFault(
        fault_type="curing_temperature_excessive",
        machine_id="machine-001",
        description="Curing press temperature exceeding setpoint intermittently",
    )


@pytest.fixture
def stocked_db(fake_db, sample_technicians, sample_parts):
    fake_db.technicians = sample_technicians
    fake_db.parts = sample_parts
    return fake_db


def test_graph_has_linear_topology():
    graph = build_graph()
    assert set(graph.nodes) == {"map_fault", "gather_resources", "plan_work_order", "save_work_order"}


@pytest.mark.asyncio
async def test_fault_is_planned_and_stored(stocked_db, scripted_chat, fault):
    scripted_chat.response = json.dumps(
        {
            "title": "Replace curing press heater",
            "type": "corrective",
            "priority": "high",
            "assignedTo": "tech-999",
            "estimatedDuration": 120,
            "partsUsed": [
                {"partNumber": "TCP-HTR-4KW", "quantity": 1},
                {"partNumber": "XYZ-000", "quantity": 1},
            ],
            "tasks": [
                {"sequence": 2, "title": "Replace heater", "estimatedDurationMinutes": "90"},
                {"sequence": 1, "title": "Lock out press", "estimatedDurationMinutes": 30},
            ],
        }
    )

    saved = await run_repair_planning(compile_graph(), fault, RepairPlannerAgent())

    assert saved.id and saved.work_order_number.startswith("WO-")
    assert saved.status == "open"
    assert saved.machine_id == "machine-001"
    assert saved.assigned_to == "tech-1"
    assert [p.part_number for p in saved.parts_used] == ["TCP-HTR-4KW"]
    assert saved.parts_used[0].part_id == "part-1"
    assert [t.sequence for t in saved.tasks] == [1, 2]
    assert saved.tasks[1].estimated_duration_minutes == 90
    assert saved.created_at == stocked_db.created_at

    assert len(stocked_db.work_orders) == 1
    assert stocked_db.work_orders[0]["id"] == saved.id

    prompt = scripted_chat.calls[0]["messages"][1]["content"]
    assert '"tech-1"' in prompt and '"tech-4"' not in prompt
    assert "TCP-HTR-4KW" in prompt and "EXT-SCR-250" not in prompt


@pytest.mark.asyncio
async def test_oracle_failure_persists_nothing(stocked_db, scripted_chat, fault):
    scripted_chat.error = openai.OpenAIError("service unavailable")

    with pytest.raises(openai.OpenAIError):
        await run_repair_planning(compile_graph(), fault, RepairPlannerAgent())
    assert stocked_db.work_orders == []


@pytest.mark.asyncio
async def test_unparsable_response_persists_nothing(stocked_db, scripted_chat, fault):
    scripted_chat.response = "Here is your plan: step 1..."

    with pytest.raises(WorkOrderParseError):
        await run_repair_planning(compile_graph(), fault, RepairPlannerAgent())
    assert stocked_db.work_orders == []


@pytest.mark.asyncio
async def test_storage_failure_stops_before_planning(fake_db, scripted_chat, fault):
    planner = RepairPlannerAgent()
    await planner.ensure_version()
    fake_db.error = psycopg.OperationalError("timeout")

    with pytest.raises(psycopg.OperationalError):
        await run_repair_planning(compile_graph(), fault, planner)
    assert scripted_chat.calls == []


@pytest.mark.asyncio
async def test_unknown_fault_plans_without_resources(stocked_db, scripted_chat):
    scripted_chat.response = json.dumps({"title": "Inspect machine", "assignedTo": "tech-1"})
    fault = DiagnosedFault(fault_type="strange_noise", machine_id="machine-009")

    saved = await run_repair_planning(compile_graph(), fault, RepairPlannerAgent())

    assert saved.assigned_to is None
    assert saved.parts_used == []
    assert saved.machine_id == "machine-009"


@pytest.mark.asyncio
async def test_missing_planner_in_config_fails(stocked_db, fault):
    with pytest.raises(ValueError):
        await compile_graph().ainvoke({"fault": fault})
    assert stocked_db.work_orders == []
