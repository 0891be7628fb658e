"""Simple HTTP Backend Server for the Video FAQ Player.

Serves the web UI, the video and subtitle files, and provides API endpoints
for the video flow and question matching.
Uses Python's built-in http.server.
"""

import json
import sys
from datetime import datetime
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from videoflow import config
from videoflow.gemini_matcher import GeminiMatcher
from videoflow.player import resolve_match
from videoflow.question_matcher import QuestionMatcher
from videoflow.subtitles import parse_vtt, subtitle_path
from videoflow.video_flow import (
    DEFAULT_VIDEO_FLOW,
    FlowError,
    SuggestedQuestion,
    VideoFlow,
    load_suggested_questions,
    load_video_flow,
)

MAX_BODY_BYTES = 64 * 1024


class VideoFlowServer(ThreadingHTTPServer):
    """HTTP server holding the loaded flow and matchers."""

    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        flow: VideoFlow,
        suggested: list[SuggestedQuestion],
        public_dir: Path = config.PUBLIC_DIR,
        videos_dir: Path = config.VIDEOS_DIR,
        subtitles_dir: Path = config.SUBTITLES_DIR,
        ai_matcher: Optional[GeminiMatcher] = None,
        cache_max_age: Optional[int] = None,
    ):
        super().__init__(address, VideoFlowHandler)
        self.flow = flow
        self.suggested = suggested
        self.matcher = QuestionMatcher(flow)
        self.ai_matcher = ai_matcher
        self.public_dir = public_dir
        self.static_mounts = {
            "/videos/": videos_dir,
            "/subtitles/": subtitles_dir,
        }
        self.cache_max_age = (
            config.get_video_cache_max_age() if cache_max_age is None else cache_max_age
        )


class VideoFlowHandler(SimpleHTTPRequestHandler):
    """HTTP handler with API endpoints for the video FAQ player."""

    server: VideoFlowServer

    def __init__(self, *args, **kwargs):
        # Set the directory to serve static files from
        self.cache_control = None
        self.status_code = None
        super().__init__(*args, directory=str(args[2].public_dir), **kwargs)

    def do_GET(self):
        """Handle GET requests."""
        parsed = urlparse(self.path)

        # API endpoints
        if parsed.path == "/api/video-flow":
            self.send_json(self.server.flow.to_dict())
        elif parsed.path == "/api/suggested-questions":
            self.send_json({"questions": [q.to_dict() for q in self.server.suggested]})
        elif parsed.path == "/api/health":
            self.handle_health()
        elif parsed.path.startswith("/api/subtitles/"):
            self.handle_subtitles(parsed.path[len("/api/subtitles/"):])
        elif parsed.path.startswith("/api/"):
            self.send_json({"error": "Not found"}, status=404)
        else:
            # Serve static files
            self.mount_static(parsed.path)
            super().do_GET()

    def do_HEAD(self):
        self.mount_static(urlparse(self.path).path)
        super().do_HEAD()

    def do_POST(self):
        """Handle POST requests."""
        parsed = urlparse(self.path)

        if parsed.path == "/api/match-question":
            self.handle_match_question()
        else:
            self.send_json({"error": "Not found"}, status=404)

    def do_OPTIONS(self):
        """Answer CORS preflight requests."""
        self.send_response(204)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.end_headers()

    def mount_static(self, path):
        """Point the handler at the videos/subtitles directory for their prefixes."""
        for prefix, directory in self.server.static_mounts.items():
            if path.startswith(prefix):
                self.directory = str(directory)
                self.path = "/" + self.path[len(prefix):]
                self.cache_control = f"public, max-age={self.server.cache_max_age}"
                return

    def list_directory(self, path):
        """Directory listings are not served."""
        self.send_error(404, "File not found")
        return None

    def handle_health(self):
        self.send_json({
            "status": "ok",
            "videos": len(self.server.flow),
            "ai_matching": bool(self.server.ai_matcher and self.server.ai_matcher.is_available()),
        })

    def handle_subtitles(self, video_id):
        """Return parsed subtitle cues for a video."""
        if self.server.flow.get(video_id) is None:
            self.send_json({"error": f"Unknown video: {video_id}"}, status=404)
            return

        path = subtitle_path(video_id, self.server.static_mounts["/subtitles/"])
        if not path.exists():
            self.send_json({"error": f"No subtitles for {video_id}"}, status=404)
            return

        try:
            cues = parse_vtt(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            print(f"[ERROR] Failed to read subtitles {path}: {e}")
            self.send_json({"error": f"Failed to read subtitles for {video_id}"}, status=500)
            return

        self.send_json({"videoId": video_id, "cues": [c.to_dict() for c in cues]})

    def handle_match_question(self):
        """Match a free-text question to a video."""
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            length = 0

        if length <= 0 or length > MAX_BODY_BYTES:
            self.send_json({"error": "Request body with 'userQuestion' is required"}, status=400)
            return

        try:
            body = json.loads(self.rfile.read(length).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            self.send_json({"error": "Invalid JSON body"}, status=400)
            return

        question = body.get("userQuestion") if isinstance(body, dict) else None
        if not isinstance(question, str) or not question.strip():
            self.send_json({"error": "userQuestion is required"}, status=400)
            return

        try:
            result = resolve_match(
                question,
                self.server.flow,
                self.server.matcher,
                self.server.ai_matcher,
            )
        except Exception as e:
            print(f"[ERROR] Matching failed for {question!r}: {e}")
            self.send_json({"error": "Failed to match question"}, status=500)
            return

        print(f"[MATCH] {question!r} -> {result.video_id} ({result.confidence})")
        self.send_json(result.to_dict())

    def send_json(self, data, status=200):
        """Send JSON response with CORS headers."""
        response = json.dumps(data, indent=2).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Content-Length", str(len(response)))
        self.end_headers()
        self.wfile.write(response)

    def send_response(self, code, message=None):
        self.status_code = code
        super().send_response(code, message)

    def end_headers(self):
        if self.cache_control and self.status_code == 200:
            self.send_header("Cache-Control", self.cache_control)
        super().end_headers()

    def log_message(self, format, *args):
        """Custom logging format."""
        print(f"[{self.log_date_time_string()}] {format % args}")


def load_flow(path: Path = config.VIDEO_FLOW_PATH) -> VideoFlow:
    """Load the video flow, falling back to the built-in three-clip flow."""
    try:
        flow = load_video_flow(path)
    except FlowError as e:
        print(f"[SERVE] {e} - using built-in video flow")
        return DEFAULT_VIDEO_FLOW

    for problem in flow.validate():
        print(f"[WARN] {problem}")
    return flow


def create_server(
    port: int,
    host: str = "",
    flow: Optional[VideoFlow] = None,
    suggested: Optional[list[SuggestedQuestion]] = None,
    **kwargs,
) -> VideoFlowServer:
    """Build a server; pass port 0 to bind an ephemeral port."""
    if flow is None:
        flow = load_flow()
    if suggested is None:
        suggested = load_suggested_questions(config.SUGGESTED_QUESTIONS_PATH)
    if "ai_matcher" not in kwargs and config.use_ai_matching():
        kwargs["ai_matcher"] = GeminiMatcher()

    return VideoFlowServer((host, port), flow, suggested, **kwargs)


def main():
    """Start the server."""
    port = config.get_port()
    server = create_server(port)

    print("=" * 50)
    print("🎬 Video FAQ Server")
    print("=" * 50)
    print("")
    print(f"  Web UI:  http://localhost:{port}")
    print(f"  Started: {datetime.now().isoformat(timespec='seconds')}")
    print("")
    print("  API Endpoints:")
    print("    GET  /api/video-flow           - Video flow JSON")
    print("    GET  /api/suggested-questions  - Suggested questions")
    print("    GET  /api/subtitles/<video_id> - Parsed subtitle cues")
    print("    POST /api/match-question       - Match {userQuestion} to a video")
    print(f"    AI matching: {'on' if server.ai_matcher else 'off'}")
    print("")
    print(f"  Place your video files in {config.VIDEOS_DIR}:")
    for video in server.flow.videos:
        if video.src.startswith("/videos/"):
            print(f"    - {video.src[len('/videos/'):]}")
    print("")
    print("=" * 50)
    print("Press Ctrl+C to stop")
    print("")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\n👋 Server stopped")
    finally:
        server.server_close()


if __name__ == "__main__":
    main()
