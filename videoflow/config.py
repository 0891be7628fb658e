"""Shared configuration for the video FAQ player.

Loads environment variables from .env and provides centralized config access.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
PUBLIC_DIR = PROJECT_ROOT / "ui" / "public"
VIDEOS_DIR = PROJECT_ROOT / "videos"
SUBTITLES_DIR = PROJECT_ROOT / "subtitles"
VIDEO_FLOW_PATH = PUBLIC_DIR / "video-flow.json"
SUGGESTED_QUESTIONS_PATH = PUBLIC_DIR / "suggested-questions.json"

DEFAULT_PORT = 3000
DEFAULT_VIDEO_CACHE_MAX_AGE = 86400
DEFAULT_VIDEO_SRC = "https://storage.googleapis.com/qudemo-videos/videos/video_intro.mp4"

# Load on import; variables already in the environment win
load_dotenv(PROJECT_ROOT / ".env", override=False)


def get_port() -> int:
    """Get the HTTP port from the environment.

    Returns:
        Port number (default 3000).

    Raises:
        ValueError: If PORT is set but not an integer.
    """
    return int(os.environ.get("PORT", DEFAULT_PORT))


def get_video_cache_max_age() -> int:
    """Seconds that browsers may cache videos and subtitles."""
    return int(os.environ.get("VIDEO_CACHE_MAX_AGE", DEFAULT_VIDEO_CACHE_MAX_AGE))


def get_gemini_api_key() -> Optional[str]:
    """Get the Gemini API key, or None if not configured."""
    key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY")
    if not key or key == "your_api_key_here":
        return None
    return key


def use_ai_matching() -> bool:
    """Whether free-text questions should be matched with Gemini first."""
    flag = os.environ.get("MATCH_WITH_AI", "").strip().lower()
    return flag in ("1", "true", "yes", "on") and get_gemini_api_key() is not None


def get_default_video_src() -> str:
    """Video played when the flow cannot be loaded."""
    return os.environ.get("DEFAULT_VIDEO_SRC", DEFAULT_VIDEO_SRC)
