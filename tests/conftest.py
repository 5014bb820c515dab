# File: tests/conftest.py

import pytest
import os
import sys
import shutil
import stat
import subprocess
import tempfile
from pathlib import Path

# 1. Point the ledger and the staging area at throwaway locations
#    BEFORE anything imports the settings singleton.
_SESSION_DIR = Path(tempfile.mkdtemp(prefix="mediaconv-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_SESSION_DIR / 'test_mediaconv.db'}")
os.environ.setdefault("MEDIACONV_TEMP_DIR", str(_SESSION_DIR / "staging"))

# 2. Add project root to path
sys.path.append(os.getcwd())

from sqlalchemy import text
from mediaconv.core.config.settings import settings
from mediaconv.core.database.connection import engine, init_db

FFMPEG = shutil.which("ffmpeg")


@pytest.fixture(scope="session", autouse=True)
def global_setup():
    """
    Runs once per test session.
    Creates the ledger tables and the staging directory.
    """
    settings.TEMP_DIR.mkdir(parents=True, exist_ok=True)
    init_db()
    yield
    shutil.rmtree(_SESSION_DIR, ignore_errors=True)


@pytest.fixture(scope="function", autouse=True)
def clean_db(global_setup):
    """
    Runs before EVERY test.
    Empties the jobs table.
    """
    with engine.begin() as conn:
        conn.execute(text('DELETE FROM "jobs";'))
    yield


@pytest.fixture
def staging_dir() -> Path:
    """The staging directory used by the default pipeline."""
    return settings.TEMP_DIR


@pytest.fixture
def fake_ffmpeg(tmp_path):
    """
    Factory for stand-in encoder binaries.
    Each is a /bin/sh script; `body` runs with the ffmpeg argv as "$@".
    """
    counter = {"n": 0}

    def _make(body: str) -> str:
        counter["n"] += 1
        script = tmp_path / f"fake_ffmpeg_{counter['n']}.sh"
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(script)

    return _make


@pytest.fixture(scope="session")
def synthetic_video(tmp_path_factory) -> Path:
    """
    A 10-second MP4 with a test pattern and a sine tone, generated with the
    real ffmpeg. Tests using it are skipped where ffmpeg isn't installed.
    """
    if FFMPEG is None:
        pytest.skip("ffmpeg not installed")

    video_path = tmp_path_factory.mktemp("media") / "synthetic.mp4"
    cmd = [
        FFMPEG, "-y",
        "-f", "lavfi", "-i", "testsrc=duration=10:size=640x360:rate=25",
        "-f", "lavfi", "-i", "sine=frequency=1000:duration=10",
        "-c:v", "libx264", "-c:a", "aac",
        "-pix_fmt", "yuv420p",
        "-shortest",
        str(video_path)
    ]
    # We use subprocess directly here to ensure the TEST SETUP is valid
    # independent of our app code.
    subprocess.run(cmd, check=True, capture_output=True)
    return video_path
