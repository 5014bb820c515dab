# File: mediaconv/core/config/settings.py

import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


class Settings:
    # --- Paths ---
    # mediaconv/core/config/settings.py -> mediaconv/core/config -> mediaconv/core -> mediaconv -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"

    # Staging area for uploaded inputs and encoder outputs
    TEMP_DIR: Path = Path(os.getenv("MEDIACONV_TEMP_DIR", tempfile.gettempdir()))

    # --- Database (job ledger) ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "mediaconv_db")

    @property
    def DATABASE_URL(self) -> str:
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit

        # SQLite unless told otherwise
        if os.getenv("USE_SQLITE", "true").lower() == "true":
            return f"sqlite:///{self.DATA_DIR / 'mediaconv.db'}"

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # --- External Tools ---
    # Auto-detect ffmpeg or use env var
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")

    # Unset means a hung encoder holds its request until the client goes away
    FFMPEG_TIMEOUT_SECONDS: Optional[float] = _optional_float("FFMPEG_TIMEOUT_SECONDS")

    # Grace period between SIGTERM and SIGKILL when an encoder is abandoned
    FFMPEG_KILL_GRACE_SECONDS: float = float(os.getenv("FFMPEG_KILL_GRACE_SECONDS", "5"))

    # --- HTTP ---
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(512 * 1024 * 1024)))

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    def ensure_dirs(self):
        """Creates the staging directory if it does not exist."""
        self.TEMP_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
