from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Load .env from project root
load_dotenv(_PROJECT_ROOT / ".env")


@dataclass(frozen=True)
class AppConfig:
    data_path: Path = Path(os.getenv("LUNCHMAP_DATA_PATH", str(_PROJECT_ROOT / "data" / "db.json")))
    session_secret: str = os.getenv("SESSION_SECRET", "lunchmap-secret-change-in-production")
    session_max_age: int = int(os.getenv("SESSION_MAX_AGE", str(60 * 60 * 12)))  # 12 hours
    default_team_code: str = os.getenv("LUNCHMAP_TEAM_CODE", "VIBE-TEAM")
    seed_example: bool = os.getenv("LUNCHMAP_SEED_EXAMPLE", "1") != "0"


DEFAULT_APP_CONFIG = AppConfig()
