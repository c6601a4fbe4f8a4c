"""
Repair Planner - Console Entry Point
====================================
Runs one diagnosed fault through the planning workflow:
- Warns about missing configuration (calls fail later, not here)
- Opens the database pool, optionally creates the schema and loads sample data
- Ensures the planning agent version exists
- Plans, reconciles and stores the work order, then prints it

Exit code is 0 when a work order was stored and 1 on any failure.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from agents.repair_planner import RepairPlannerAgent
from config.settings import LOGGING, SAMPLE_FAULT, missing_settings
from graph.builder import compile_graph, run_repair_planning
from models.work_order import DiagnosedFault
from services.database import DatabaseService
from services.fault_mapping import known_fault_types
from tools.db_tools import upsert_parts, upsert_technicians
from tools.formatting_tools import format_work_order_card

logger = logging.getLogger("repair_planner")

SAMPLE_DATA_FILE = Path(__file__).parent / "data" / "sample_inventory.json"


def configure_logging() -> None:
    logging.basicConfig(
        level=LOGGING["level"],
        format=LOGGING["format"],
        datefmt=LOGGING["datefmt"],
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Plan a repair work order for a diagnosed fault.")
    parser.add_argument(
        "--fault-type",
        default=SAMPLE_FAULT["faultType"],
        help=f"Fault type to plan for (known: {', '.join(known_fault_types())})",
    )
    parser.add_argument("--machine-id", default=SAMPLE_FAULT["machineId"])
    parser.add_argument("--description", default=SAMPLE_FAULT["description"])
    parser.add_argument(
        "--init-schema",
        action="store_true",
        help="Create the database tables before planning",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help=f"Load sample technicians and parts from {SAMPLE_DATA_FILE.name}",
    )
    return parser.parse_args(argv)


async def seed_sample_inventory(path: Path = SAMPLE_DATA_FILE) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    await upsert_technicians.ainvoke({"technicians": data["technicians"]})
    await upsert_parts.ainvoke({"parts": data["parts"]})


async def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    for warning in missing_settings():
        logger.warning(warning)

    fault = DiagnosedFault(
        fault_type=args.fault_type,
        machine_id=args.machine_id,
        description=args.description,
    )

    try:
        await DatabaseService.initialize()
        if args.init_schema:
            await DatabaseService.ensure_schema()
        if args.seed:
            await seed_sample_inventory()

        planner = RepairPlannerAgent()
        logger.info("Ensuring agent version exists...")
        await planner.ensure_version()

        graph = compile_graph()
        logger.info(f"Planning work order for fault {fault.fault_type} on {fault.machine_id}...")
        work_order = await run_repair_planning(graph, fault, planner)

        logger.info(f"Work order created: {work_order.work_order_number} (id: {work_order.id})")
        print(format_work_order_card(work_order))
    except Exception:
        logger.exception("Error running repair planning workflow")
        return 1
    finally:
        await DatabaseService.close()

    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(asyncio.run(main()))
