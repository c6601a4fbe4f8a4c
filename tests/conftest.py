"""Shared fixtures: an in-memory stand-in for DatabaseService and a scripted LLM."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

import services.llm_service as llm
from services.database import DatabaseService


# =============================================================================
# Fake database
# =============================================================================


class FakeDatabase:
    """Answers the queries issued by tools/db_tools.py from plain lists."""

    created_at = datetime(2026, 1, 15, 8, 30, tzinfo=timezone.utc)

    def __init__(self):
        self.technicians: list[dict] = []
        self.parts: list[dict] = []
        self.work_orders: list[dict] = []
        self.agent_versions: list[dict] = []
        self.queries: list[str] = []
        self.error: Exception | None = None

    async def fetch_all(self, query, params=None):
        self.queries.append(query)
        if self.error:
            raise self.error
        if "FROM technicians" in query:
            return [{"id": d["id"], "doc": d} for d in self.technicians if d.get("available", True)]
        if "FROM parts_inventory" in query:
            wanted = params[0]
            rows = [d for d in self.parts if d["partNumber"] in wanted]
            rows.sort(key=lambda d: d["partNumber"])
            return [{"id": d["id"], "doc": d} for d in rows]
        raise AssertionError(f"unexpected query: {query}")

    async def execute_returning(self, query, params=None):
        self.queries.append(query)
        if self.error:
            raise self.error
        if "INSERT INTO work_orders" in query:
            work_order_id, status, doc = params
            self.work_orders.append({"id": work_order_id, "status": status, "doc": doc.obj})
            return {"doc": doc.obj, "created_at": self.created_at}
        if "INSERT INTO agent_versions" in query:
            name, model, instructions, definition_hash, _ = params
            for row in self.agent_versions:
                if row["agent_name"] == name and row["definition_hash"] == definition_hash:
                    return {"agent_name": name, "version": row["version"], "model": row["model"]}
            version = 1 + max(
                (r["version"] for r in self.agent_versions if r["agent_name"] == name), default=0
            )
            self.agent_versions.append(
                {
                    "agent_name": name,
                    "version": version,
                    "model": model,
                    "instructions": instructions,
                    "definition_hash": definition_hash,
                }
            )
            return {"agent_name": name, "version": version, "model": model}
        if "INSERT INTO technicians" in query:
            self.technicians.append(params[2].obj)
            return {"id": params[0]}
        if "INSERT INTO parts_inventory" in query:
            self.parts.append(params[2].obj)
            return {"id": params[0]}
        raise AssertionError(f"unexpected query: {query}")


@pytest.fixture
def fake_db(monkeypatch) -> FakeDatabase:
    db = FakeDatabase()
    monkeypatch.setattr(DatabaseService, "fetch_all", db.fetch_all)
    monkeypatch.setattr(DatabaseService, "execute_returning", db.execute_returning)
    return db


# =============================================================================
# Fake LLM
# =============================================================================


class ScriptedChat:
    """Replaces llm.chat; returns `response` or raises `error`."""

    def __init__(self):
        self.response = "{}"
        self.error: Exception | None = None
        self.calls: list[dict] = []

    async def __call__(self, messages, model=None, temperature=None, max_tokens=None, response_format=None):
        self.calls.append({"messages": messages, "model": model, "response_format": response_format})
        if self.error:
            raise self.error
        return {"content": self.response, "role": "assistant", "usage": {}}


@pytest.fixture
def scripted_chat(monkeypatch) -> ScriptedChat:
    chat = ScriptedChat()
    monkeypatch.setattr(llm, "chat", chat)
    return chat


# =============================================================================
# Sample data
# =============================================================================


@pytest.fixture
def sample_technicians() -> list[dict]:
    return [
        {"id": "tech-1", "name": "Dana", "department": "Maintenance",
         "skills": ["tire_curing_press", "temperature_control", "instrumentation"], "available": True},
        {"id": "tech-2", "name": "Alex", "department": "Maintenance",
         "skills": ["Temperature_Control"], "available": True},
        {"id": "tech-3", "name": "Sam", "department": "Quality",
         "skills": ["data_analysis"], "available": True},
        {"id": "tech-4", "name": "Kim", "department": "Maintenance",
         "skills": ["tire_curing_press", "temperature_control", "instrumentation"], "available": False},
    ]


@pytest.fixture
def sample_parts() -> list[dict]:
    return [
        {"id": "part-1", "partNumber": "TCP-HTR-4KW", "description": "Heating element 4kW",
         "category": "curing_press", "quantityAvailable": 4},
        {"id": "part-2", "partNumber": "GEN-TS-K400", "description": "Thermocouple type K",
         "category": "general", "quantityAvailable": 12},
        {"id": "part-3", "partNumber": "EXT-SCR-250", "description": "Extruder screw",
         "category": "extruder", "quantityAvailable": 1},
    ]
