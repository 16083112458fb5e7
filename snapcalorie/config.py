from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the calorie tracking core."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("SNAPCAL_DATA_ROOT") or data_root_default
        ).expanduser()
        # Civil day boundary used for every day bucket (hours east of UTC).
        self.gmt_offset_hours: int = int(os.environ.get("SNAPCAL_GMT_OFFSET_HOURS") or "3")
        self.tick_seconds: float = float(os.environ.get("SNAPCAL_TICK_SECONDS") or "1.0")

        self.gemini_api_key: str | None = os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY")
        self.gemini_base_url: str = os.environ.get(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        )
        self.gemini_model: str = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
        self.gemini_timeout: float = float(os.environ.get("GEMINI_TIMEOUT", "30"))
        self.max_image_bytes: int = int(os.environ.get("SNAPCAL_MAX_IMAGE_BYTES") or "5000000")

        cors = os.environ.get("SNAPCAL_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
