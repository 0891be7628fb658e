"""Pytest fixtures for the video FAQ player tests."""

import sys
import threading
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from videoflow.video_flow import (
    VideoEntry,
    VideoFlow,
    load_suggested_questions,
    load_video_flow,
)


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def public_dir(project_root):
    """Return path to the static front-end directory."""
    return project_root / "ui" / "public"


@pytest.fixture
def flow_path(public_dir):
    """Return path to video-flow.json."""
    return public_dir / "video-flow.json"


@pytest.fixture
def subtitles_dir(project_root):
    """Return path to the subtitles directory."""
    return project_root / "subtitles"


@pytest.fixture
def sample_flow(flow_path):
    """Load the shipped FAQ video flow."""
    return load_video_flow(flow_path)


@pytest.fixture
def suggested(public_dir):
    """Load the shipped suggested questions."""
    return load_suggested_questions(public_dir / "suggested-questions.json")


@pytest.fixture
def flow_without_fallback():
    """Small flow with no fallback video."""
    return VideoFlow(videos=[
        VideoEntry(id="export", src="/videos/export.mp4",
                   question="Can I export analytics reports?"),
        VideoEntry(id="crm", src="/videos/crm.mp4",
                   question="Does it integrate with Salesforce?",
                   answer="Yes, Salesforce sync is built in."),
    ])


@pytest.fixture
def sample_queries():
    """Return sample questions with their expected videos."""
    return [
        {"query": "How much does it cost?", "expected_video": "video_4"},
        {"query": "Is my data safe?", "expected_video": "video_5"},
        {"query": "What is Qudemo?", "expected_video": "video_1"},
        {"query": "Who is Qudemo for", "expected_video": "video_3"},
    ]


@pytest.fixture
def server(sample_flow, suggested, public_dir, subtitles_dir, tmp_path):
    """Run the HTTP server on an ephemeral port in a background thread."""
    from ui.server import create_server

    videos_dir = tmp_path / "videos"
    videos_dir.mkdir()
    (videos_dir / "clip.mp4").write_bytes(b"\x00\x00\x00\x18ftypmp42")

    srv = create_server(
        0,
        host="127.0.0.1",
        flow=sample_flow,
        suggested=suggested,
        public_dir=public_dir,
        videos_dir=videos_dir,
        subtitles_dir=subtitles_dir,
        ai_matcher=None,
        cache_max_age=3600,
    )
    thread = threading.Thread(target=srv.serve_forever, daemon=True)
    thread.start()
    try:
        yield srv
    finally:
        srv.shutdown()
        srv.server_close()


@pytest.fixture
def base_url(server):
    """Return the base URL of the running test server."""
    host, port = server.server_address[:2]
    return f"http://{host}:{port}"
