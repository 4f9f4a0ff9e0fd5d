"""
Configuration, settings loading and logging setup for the rateio simulator
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Optional

from dotenv import load_dotenv

from models import Deposit, RateioState, FeeSettings
from utils import app_dir, new_id

LOG_FILE = "rateio.log"
SETTINGS_FILE = "settings.json"
DEFAULT_MODEL = "gemini-2.5-flash"


@dataclass
class Settings:
    """User-tunable defaults"""
    fee_percentage: float = 30.0
    number_of_lawyers: int = 1
    hide_zero_paid: bool = True
    gemini_model: str = DEFAULT_MODEL
    log_level: str = "INFO"


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from JSON file, falling back to defaults"""
    path = path or os.path.join(app_dir(), SETTINGS_FILE)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return Settings()
    known = {f.name for f in fields(Settings)}
    s = Settings(**{k: v for k, v in data.items() if k in known})
    s.fee_percentage = max(0.0, float(s.fee_percentage))
    s.number_of_lawyers = max(1, int(s.number_of_lawyers))
    s.hide_zero_paid = bool(s.hide_zero_paid)
    return s


def get_api_key() -> Optional[str]:
    """Gemini API key from the environment (a local .env is honoured)"""
    load_dotenv()
    return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")


def get_default_state(settings: Optional[Settings] = None) -> RateioState:
    """Fresh page state: one zero deposit, nothing extracted"""
    settings = settings or Settings()
    return RateioState(
        deposits=[Deposit(new_id(), 0.0)],
        fee=FeeSettings(enabled=False, percentage=settings.fee_percentage),
        number_of_lawyers=settings.number_of_lawyers,
        hide_zero_paid=settings.hide_zero_paid,
    )


def setup_logging(level: str = "INFO", filename: Optional[str] = None) -> None:
    """Append log lines to rateio.log in the app directory"""
    filename = filename or os.path.join(app_dir(), LOG_FILE)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        filename=filename,
        filemode="a",
    )
