"""
Fault Mapping
=============
Maps a diagnosed fault type to the skills and part numbers needed to fix it.
The table itself lives in config/settings.py (FAULT_MAPPINGS).
"""

import logging

from config.settings import FAULT_MAPPINGS

logger = logging.getLogger(__name__)


def required_skills(fault_type: str) -> list[str]:
    """Skills needed for a fault type, in table order. Unknown types yield []."""
    entry = FAULT_MAPPINGS.get(fault_type or "")
    if entry is None:
        logger.info(f"No skill mapping for fault type '{fault_type}'")
        return []
    return list(entry["skills"])


def required_parts(fault_type: str) -> list[str]:
    """Part numbers needed for a fault type, in table order. Unknown types yield []."""
    entry = FAULT_MAPPINGS.get(fault_type or "")
    if entry is None:
        logger.info(f"No parts mapping for fault type '{fault_type}'")
        return []
    return list(entry["parts"])


def known_fault_types() -> list[str]:
    return sorted(FAULT_MAPPINGS)
