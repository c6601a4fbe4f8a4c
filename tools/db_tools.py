"""
Database Tools
==============
LangChain @tool-decorated functions for the document collections:
technicians and parts lookups for planning, work order persistence,
agent version registration, and inventory seeding.

Storage errors are logged here and re-raised unchanged.
"""

import hashlib
import logging
import uuid
from typing import Iterable

import psycopg
from langchain_core.tools import tool
from psycopg.types.json import Jsonb

from config.settings import WORK_ORDER_DEFAULTS
from models.work_order import Part, Technician, WorkOrder
from services.database import DatabaseService

logger = logging.getLogger(__name__)


def _from_row(model, row: dict):
    """Build a model from an (id, doc) row; the document's own fields win."""
    return model.model_validate({"id": row["id"], **(row["doc"] or {})})


# ============================================================
# Technician Tools
# ============================================================


def rank_technicians(
    technicians: Iterable[Technician], required_skills: Iterable[str]
) -> list[Technician]:
    """
    Score technicians by case-insensitive skill overlap with required_skills.
    Zero-overlap technicians are dropped; the rest are ordered by score
    descending, then name ascending.
    """
    wanted = {s.lower() for s in required_skills}
    if not wanted:
        return []

    ranked = []
    for tech in technicians:
        have = {s.lower() for s in tech.skills}
        score = len(have & wanted)
        if score > 0:
            ranked.append(tech.model_copy(update={"match_score": score}))

    ranked.sort(key=lambda t: t.name)
    ranked.sort(key=lambda t: t.match_score, reverse=True)
    return ranked


@tool
async def get_available_technicians(required_skills: list[str]) -> list[Technician]:
    """Get available technicians with at least one of the required skills, best match first.
    Args:
        required_skills: Skills the repair needs (matched case-insensitively).
    """
    if not required_skills:
        logger.info("No required skills provided; returning empty technician list")
        return []

    try:
        rows = await DatabaseService.fetch_all(
            """
            SELECT id, doc FROM technicians
            WHERE doc @> '{"available": true}'
            """
        )
    except psycopg.Error:
        logger.exception("Database error while querying technicians")
        raise

    ranked = rank_technicians((_from_row(Technician, r) for r in rows), required_skills)
    logger.info(f"Found {len(ranked)} available technicians matching skills")
    return ranked


# ============================================================
# Parts Inventory Tools
# ============================================================


@tool
async def get_parts_inventory(part_numbers: list[str]) -> list[Part]:
    """Get inventory records for the given part numbers. Unknown part numbers are skipped.
    Args:
        part_numbers: Exact part numbers to look up (e.g., TCP-HTR-4KW).
    """
    if not part_numbers:
        logger.info("No part numbers provided; returning empty parts list")
        return []

    try:
        rows = await DatabaseService.fetch_all(
            """
            SELECT id, doc FROM parts_inventory
            WHERE doc->>'partNumber' = ANY(%s)
            ORDER BY doc->>'partNumber'
            """,
            (list(part_numbers),),
        )
    except psycopg.Error:
        logger.exception("Database error while fetching parts")
        raise

    parts = [_from_row(Part, r) for r in rows]
    logger.info(f"Fetched {len(parts)} parts for {len(part_numbers)} requested part numbers")
    return parts


# ============================================================
# Work Order Tools
# ============================================================


@tool
async def create_work_order(work_order: dict) -> WorkOrder:
    """Persist a new work order document, partitioned by its status.
    Args:
        work_order: The work order as a camelCase document.
    """
    order = WorkOrder.model_validate(work_order)
    updates = {}
    if not order.id.strip():
        updates["id"] = str(uuid.uuid4())
    if not order.status.strip():
        updates["status"] = WORK_ORDER_DEFAULTS["status"]
    if updates:
        order = order.model_copy(update=updates)

    try:
        row = await DatabaseService.execute_returning(
            """
            INSERT INTO work_orders (id, status, doc)
            VALUES (%s, %s, %s)
            RETURNING doc, created_at
            """,
            (order.id, order.status, Jsonb(order.to_document())),
        )
    except psycopg.Error:
        logger.exception("Database error while creating work order")
        raise

    stored = WorkOrder.model_validate({**row["doc"], "createdAt": row["created_at"]})
    logger.info(f"Created work order {stored.id} in partition '{stored.status}'")
    return stored


# ============================================================
# Agent Registry Tools
# ============================================================


@tool
async def register_agent_version(agent_name: str, model: str, instructions: str) -> dict:
    """Register an agent definition, reusing the existing version when it is unchanged.
    Args:
        agent_name: Logical agent name.
        model: Model deployment the agent runs on.
        instructions: The agent's fixed instruction block.
    """
    definition_hash = hashlib.sha256(f"{model}\n{instructions}".encode("utf-8")).hexdigest()
    try:
        row = await DatabaseService.execute_returning(
            """
            INSERT INTO agent_versions (agent_name, version, model, instructions, definition_hash)
            SELECT %s, COALESCE(MAX(version), 0) + 1, %s, %s, %s
            FROM agent_versions WHERE agent_name = %s
            ON CONFLICT (agent_name, definition_hash)
                DO UPDATE SET agent_name = EXCLUDED.agent_name
            RETURNING agent_name, version, model
            """,
            (agent_name, model, instructions, definition_hash, agent_name),
        )
    except psycopg.Error:
        logger.exception(f"Database error while registering agent {agent_name}")
        raise
    return row


# ============================================================
# Inventory Seeding Tools
# ============================================================


@tool
async def upsert_technicians(technicians: list[dict]) -> int:
    """Insert or replace technician documents.
    Args:
        technicians: Technician documents (camelCase keys).
    """
    count = 0
    for raw in technicians:
        tech = Technician.model_validate(raw)
        try:
            await DatabaseService.execute_returning(
                """
                INSERT INTO technicians (id, department, doc) VALUES (%s, %s, %s)
                ON CONFLICT (id) DO UPDATE SET department = EXCLUDED.department, doc = EXCLUDED.doc
                RETURNING id
                """,
                (tech.id, tech.department, Jsonb(tech.to_document())),
            )
        except psycopg.Error:
            logger.exception(f"Database error while upserting technician {tech.id}")
            raise
        count += 1
    logger.info(f"Upserted {count} technicians")
    return count


@tool
async def upsert_parts(parts: list[dict]) -> int:
    """Insert or replace parts inventory documents.
    Args:
        parts: Part documents (camelCase keys).
    """
    count = 0
    for raw in parts:
        part = Part.model_validate(raw)
        try:
            await DatabaseService.execute_returning(
                """
                INSERT INTO parts_inventory (id, category, doc) VALUES (%s, %s, %s)
                ON CONFLICT (id) DO UPDATE SET category = EXCLUDED.category, doc = EXCLUDED.doc
                RETURNING id
                """,
                (part.id, part.category, Jsonb(part.to_document())),
            )
        except psycopg.Error:
            logger.exception(f"Database error while upserting part {part.part_number}")
            raise
        count += 1
    logger.info(f"Upserted {count} parts")
    return count
