"""
ONE-STOP-SHOP Configuration File
================================
All hardcoded values, agent configuration, model settings, database config,
fault mappings and work order numbering live here.

To change the planning agent, the model deployment, or what a fault type
requires, edit ONLY this file.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# ============================================================
# Agent Configuration
# ============================================================

AGENTS = {
    "repair_planner": {
        "name": "RepairPlannerAgent",
        "model": os.getenv("MODEL_DEPLOYMENT_NAME", "gpt-4o"),
    },
}

# ============================================================
# Model Configuration
# ============================================================

MODELS = {
    "main": AGENTS["repair_planner"]["model"],
    "endpoint": os.getenv("OPENAI_BASE_URL", ""),   # Empty = default OpenAI endpoint
    "api_key": os.getenv("OPENAI_API_KEY", ""),
    "temperature": 0.1,              # Low temperature for deterministic plans
    "max_tokens": 4096,
    "response_snippet_chars": 200,   # How much of the raw response to log
}

# ============================================================
# Database Configuration
# ============================================================

DATABASE = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "5432")),
    "name": os.getenv("DB_NAME", "factory_db"),
    "user": os.getenv("DB_USER", "postgres"),
    "password": os.getenv("DB_PASSWORD", ""),
    "min_connections": 1,
    "max_connections": 5,
}

def get_database_url() -> str:
    """Build PostgreSQL connection URL from config."""
    return (
        f"postgresql://{DATABASE['user']}:{DATABASE['password']}"
        f"@{DATABASE['host']}:{DATABASE['port']}/{DATABASE['name']}"
    )

# ============================================================
# Logging
# ============================================================

LOGGING = {
    "level": os.getenv("LOG_LEVEL", "INFO").upper(),
    "format": "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    "datefmt": "%H:%M:%S",
}

# ============================================================
# Work Order Numbering & Defaults
# ============================================================

PREFIXES = {
    "work_order": "WO",
}

WORK_ORDER_DEFAULTS = {
    "type": "corrective",
    "priority": "medium",
    "status": "open",
}

WORK_ORDER_TYPES = ("corrective", "preventive", "emergency")
WORK_ORDER_PRIORITIES = ("critical", "high", "medium", "low")

# ============================================================
# Fault Type -> Required Skills / Parts
# ============================================================

FAULT_MAPPINGS = {
    "curing_temperature_excessive": {
        "skills": ["tire_curing_press", "temperature_control", "instrumentation", "electrical_systems", "plc_troubleshooting", "mold_maintenance"],
        "parts": ["TCP-HTR-4KW", "GEN-TS-K400"],
    },
    "curing_cycle_time_deviation": {
        "skills": ["tire_curing_press", "plc_troubleshooting", "mold_maintenance", "bladder_replacement", "hydraulic_systems", "instrumentation"],
        "parts": ["TCP-BLD-800", "TCP-SEAL-200"],
    },
    "building_drum_vibration": {
        "skills": ["tire_building_machine", "vibration_analysis", "bearing_replacement", "alignment", "precision_alignment", "drum_balancing", "mechanical_systems"],
        "parts": ["TBM-BRG-6220", "TBM-LS-500N"],
    },
    "ply_tension_excessive": {
        "skills": ["tire_building_machine", "tension_control", "servo_systems", "precision_alignment", "sensor_alignment", "plc_programming"],
        "parts": ["TBM-LS-500N", "TBM-SRV-5KW"],
    },
    "extruder_barrel_overheating": {
        "skills": ["tire_extruder", "temperature_control", "rubber_processing", "screw_maintenance", "instrumentation", "electrical_systems", "motor_drives"],
        "parts": ["EXT-HTR-BAND", "GEN-TS-K400"],
    },
    "low_material_throughput": {
        "skills": ["tire_extruder", "rubber_processing", "screw_maintenance", "motor_drives", "temperature_control"],
        "parts": ["EXT-SCR-250", "EXT-DIE-TR"],
    },
    "high_radial_force_variation": {
        "skills": ["tire_uniformity_machine", "data_analysis", "measurement_systems", "tire_building_machine", "tire_curing_press"],
        "parts": [],
    },
    "load_cell_drift": {
        "skills": ["tire_uniformity_machine", "load_cell_calibration", "measurement_systems", "sensor_alignment", "instrumentation"],
        "parts": ["TUM-LC-2KN", "TUM-ENC-5000"],
    },
    "mixing_temperature_excessive": {
        "skills": ["banbury_mixer", "temperature_control", "rubber_processing", "instrumentation", "electrical_systems", "mechanical_systems"],
        "parts": ["BMX-TIP-500", "GEN-TS-K400"],
    },
    "excessive_mixer_vibration": {
        "skills": ["banbury_mixer", "vibration_analysis", "bearing_replacement", "alignment", "mechanical_systems", "preventive_maintenance"],
        "parts": ["BMX-BRG-22320", "BMX-SEAL-DP"],
    },
    "calender_gap_deviation": {
        "skills": ["calender_line", "precision_alignment", "hydraulic_systems", "instrumentation"],
        "parts": ["CAL-HYD-CYL", "CAL-GAP-SNS"],
    },
    "bead_wire_tension_loss": {
        "skills": ["bead_winder", "tension_control", "servo_systems", "mechanical_systems"],
        "parts": ["BWD-BRK-PAD", "TBM-LS-500N"],
    },
    "conveyor_belt_misalignment": {
        "skills": ["conveyor_systems", "alignment", "mechanical_systems"],
        "parts": ["CNV-BELT-1200", "CNV-IDL-ROLL"],
    },
    "hydraulic_pressure_loss": {
        "skills": ["hydraulic_systems", "mechanical_systems", "preventive_maintenance"],
        "parts": ["TCP-SEAL-200", "GEN-HYD-FLT"],
    },
    "electrical_power_fault": {
        "skills": ["electrical_systems", "motor_drives", "plc_troubleshooting"],
        "parts": ["GEN-CTR-50A", "GEN-FUSE-63A"],
    },
}

# ============================================================
# Demonstration Fault (used by app.py when no args are given)
# ============================================================

SAMPLE_FAULT = {
    "faultType": "curing_temperature_excessive",
    "machineId": "machine-001",
    "description": "Curing press temperature exceeding setpoint intermittently",
}


def missing_settings() -> list[str]:
    """
    Return human-readable warnings for configuration that is absent.
    Missing values never stop the process; the first call that needs
    them fails instead.
    """
    warnings = []
    if not MODELS["api_key"]:
        warnings.append(
            "OPENAI_API_KEY is not set. Planning agent calls will fail without valid credentials."
        )
    if not os.getenv("DB_HOST"):
        warnings.append(
            f"DB_HOST is not set; using '{DATABASE['host']}'. Database calls may fail."
        )
    if not DATABASE["password"]:
        warnings.append(
            "DB_PASSWORD is not set; database calls will fail without valid credentials."
        )
    return warnings
