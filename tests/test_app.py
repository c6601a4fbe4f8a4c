"""Tests for the console entry point's exit codes."""

import json

import openai
import pytest

import app
from services.database import DatabaseService


@pytest.fixture
def no_pool(monkeypatch):
    calls = []

    async def initialize():
        calls.append("initialize")

    async def close():
        calls.append("close")

    async def ensure_schema():
        calls.append("ensure_schema")

    monkeypatch.setattr(DatabaseService, "initialize", initialize)
    monkeypatch.setattr(DatabaseService, "close", close)
    monkeypatch.setattr(DatabaseService, "ensure_schema", ensure_schema)
    return calls


def test_parse_args_defaults_to_sample_fault():
    args = app.parse_args([])
    assert args.fault_type == "curing_temperature_excessive"
    assert args.machine_id == "machine-001"
    assert not args.init_schema and not args.seed


@pytest.mark.asyncio
async def test_main_returns_zero_and_prints_card(no_pool, fake_db, scripted_chat, capsys):
    scripted_chat.response = json.dumps({"title": "Replace heater", "tasks": [{"sequence": 1, "title": "Lock out"}]})

    code = await app.main(["--init-schema", "--seed"])

    assert code == 0
    assert no_pool == ["initialize", "ensure_schema", "close"]
    assert len(fake_db.work_orders) == 1
    saved = fake_db.work_orders[0]["doc"]
    assert saved["assignedTo"] == "tech-001"
    assert {p["partNumber"] for p in saved["partsUsed"]} == set()
    assert f"### Work Order: {saved['workOrderNumber']}" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_main_returns_one_on_oracle_failure(no_pool, fake_db, scripted_chat):
    scripted_chat.error = openai.OpenAIError("unauthorized")

    code = await app.main(["--fault-type", "load_cell_drift", "--machine-id", "machine-004"])

    assert code == 1
    assert fake_db.work_orders == []
    assert no_pool[-1] == "close"
