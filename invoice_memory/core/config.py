"""
Configuration - single point of control for thresholds, memory constants
and storage location. Values come from environment variables.
"""

import os
from pathlib import Path

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/invoice_memory.db")

# Version string
VERSION = "1.0.0"

# Apply-stage thresholds
IGNORE_BELOW = float(os.getenv("IGNORE_BELOW", "0.4"))  # below: noise
STRONG_AT = float(os.getenv("STRONG_AT", "0.7"))  # at or above: auto-applied

# Decide-stage thresholds
AUTO_PROCESS_AT = float(os.getenv("AUTO_PROCESS_AT", "0.75"))
REVIEW_AT = float(os.getenv("REVIEW_AT", "0.5"))

# Starting confidence for newly learned memory
VENDOR_INITIAL_CONFIDENCE = 0.5
CORRECTION_INITIAL_CONFIDENCE = 0.5
RESOLUTION_INITIAL_CONFIDENCE = 0.7

# Reinforcement / decay steps. Vendor decay is larger than its reinforcement.
VENDOR_REINFORCE_STEP = 0.1
VENDOR_DECAY_STEP = 0.2
CORRECTION_REINFORCE_STEP = 0.05
CORRECTION_PENALTY_STEP = 0.1

# Comma separated terms that mark a proposed correction as risky
RISKY_KEYWORDS = os.getenv("RISKY_KEYWORDS", "tax,vat,total,amount,payment")

# Processed invoices the API keeps for later feedback, oldest evicted first
INVOICE_REGISTRY_SIZE = int(os.getenv("INVOICE_REGISTRY_SIZE", "1000"))


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    path = db_path or DB_PATH
    if path == ":memory:":
        return
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def get_risky_keywords(raw: str = None) -> tuple:
    """Parse the risky keyword list into lowercase, non-empty terms."""
    value = RISKY_KEYWORDS if raw is None else raw
    return tuple(k.strip().lower() for k in value.split(",") if k.strip())


def validate_config():
    """Validate threshold configuration and return any issues."""
    issues = []

    if not 0.0 <= IGNORE_BELOW <= STRONG_AT <= 1.0:
        issues.append(f"Expected 0 <= IGNORE_BELOW ({IGNORE_BELOW}) <= STRONG_AT ({STRONG_AT}) <= 1")

    if not 0.0 <= REVIEW_AT <= AUTO_PROCESS_AT <= 1.0:
        issues.append(f"Expected 0 <= REVIEW_AT ({REVIEW_AT}) <= AUTO_PROCESS_AT ({AUTO_PROCESS_AT}) <= 1")

    if not get_risky_keywords():
        issues.append("RISKY_KEYWORDS must contain at least one keyword")

    return issues
