"""Central configuration loader for Portfolio Advisor."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Project root is the parent of the src/ directory
PROJECT_ROOT = Path(__file__).resolve().parent.parent

load_dotenv(PROJECT_ROOT / ".env")


def load_settings(path: Path | None = None) -> dict:
    """Load settings from configs/settings.yaml (or PORTFOLIO_ADVISOR_SETTINGS)."""
    settings_path = path or Path(
        os.getenv("PORTFOLIO_ADVISOR_SETTINGS", PROJECT_ROOT / "configs" / "settings.yaml")
    )
    with open(settings_path) as f:
        return yaml.safe_load(f) or {}


SETTINGS = load_settings()


# --- API Keys ---
class Keys:
    FMP = os.getenv("FMP_API_KEY", "")


# --- Paths ---
class Paths:
    ROOT = PROJECT_ROOT
    DATA_CACHE = Path(os.getenv("PORTFOLIO_ADVISOR_CACHE_DIR", PROJECT_ROOT / "data" / "cache"))
    REPORTS_OUTPUT = PROJECT_ROOT / "reports" / "output"
    REPORTS_TEMPLATES = PROJECT_ROOT / "reports" / "templates"
