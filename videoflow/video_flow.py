"""Video flow model.

A video flow is an ordered list of clips. Each clip may carry the FAQ
question it answers and the follow-up questions offered when it ends;
follow-ups branch to another clip by id.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


class FlowError(Exception):
    """Raised when a video flow file is missing or malformed."""


@dataclass
class NextQuestion:
    """A follow-up question shown after a clip."""

    id: str
    text: str
    next_video: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "NextQuestion":
        return cls(
            id=data.get("id", ""),
            text=data.get("text", ""),
            next_video=data.get("nextVideo"),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "nextVideo": self.next_video}


@dataclass
class VideoEntry:
    """A single clip in the flow."""

    id: str
    src: str
    question: Optional[str] = None   # FAQ question this clip answers
    answer: Optional[str] = None     # Text shown in chat when matched
    title: Optional[str] = None
    subtitle: Optional[str] = None   # Remote VTT URL
    is_fallback: bool = False        # Played when nothing else matches
    next_questions: list[NextQuestion] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "VideoEntry":
        """Build an entry from its JSON form.

        Accepts either a single ``nextQuestion`` (object or null) or a
        ``nextQuestions`` list; both end up in ``next_questions``.
        """
        if "id" not in data:
            raise FlowError(f"Video entry without id: {data!r}")

        raw_questions = data.get("nextQuestions")
        if raw_questions is None:
            single = data.get("nextQuestion")
            raw_questions = [single] if single else []

        return cls(
            id=data["id"],
            src=data.get("src", ""),
            question=data.get("question"),
            answer=data.get("answer"),
            title=data.get("title"),
            subtitle=data.get("subtitle"),
            is_fallback=bool(data.get("isFallback", False)),
            next_questions=[NextQuestion.from_dict(q) for q in raw_questions],
        )

    def to_dict(self) -> dict:
        """Convert to the camelCase wire format, omitting empty fields."""
        data = {
            "id": self.id,
            "src": self.src,
            "question": self.question,
            "answer": self.answer,
            "title": self.title,
            "subtitle": self.subtitle,
            "isFallback": self.is_fallback,
            "nextQuestions": [q.to_dict() for q in self.next_questions],
        }
        return {k: v for k, v in data.items() if v not in (None, False, [])}


@dataclass
class VideoFlow:
    """Ordered list of clips with lookup by id."""

    videos: list[VideoEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "VideoFlow":
        videos = data.get("videos") if isinstance(data, dict) else None
        if not isinstance(videos, list):
            raise FlowError("Video flow must contain a 'videos' list")
        return cls(videos=[VideoEntry.from_dict(v) for v in videos])

    def to_dict(self) -> dict:
        return {"videos": [v.to_dict() for v in self.videos]}

    def __len__(self) -> int:
        return len(self.videos)

    def get(self, video_id: str) -> Optional[VideoEntry]:
        for video in self.videos:
            if video.id == video_id:
                return video
        return None

    def index_of(self, video_id: str) -> int:
        for i, video in enumerate(self.videos):
            if video.id == video_id:
                return i
        return -1

    def fallback(self) -> Optional[VideoEntry]:
        return next((v for v in self.videos if v.is_fallback), None)

    def questions(self) -> list[VideoEntry]:
        """Clips that answer a FAQ question, in flow order."""
        return [v for v in self.videos if v.question]

    def validate(self) -> list[str]:
        """Check the flow for structural problems.

        Returns:
            List of human-readable problems; empty if the flow is valid.
        """
        problems = []
        seen = set()
        for video in self.videos:
            if video.id in seen:
                problems.append(f"Duplicate video id: {video.id}")
            seen.add(video.id)
            if not video.src:
                problems.append(f"Video {video.id} has no src")

        for video in self.videos:
            for question in video.next_questions:
                if question.next_video and question.next_video not in seen:
                    problems.append(
                        f"Question {question.id} in {video.id} points to "
                        f"unknown video {question.next_video}"
                    )
        return problems


# Used when no video-flow.json is present
DEFAULT_VIDEO_FLOW = VideoFlow(
    videos=[
        VideoEntry(
            id="video_1",
            src="/videos/video_1.mp4",
            next_questions=[
                NextQuestion(
                    id="question_1",
                    text="Thanks, Jazeem! What exactly is Qudemo?",
                    next_video="video_2",
                )
            ],
        ),
        VideoEntry(
            id="video_2",
            src="/videos/video_2.mp4",
            next_questions=[
                NextQuestion(
                    id="question_2",
                    text="Oh, interesting! So how is this different from a regular demo video?",
                    next_video="video_3",
                )
            ],
        ),
        VideoEntry(id="video_3", src="/videos/video_3.mp4"),
    ]
)


def load_video_flow(path: Path) -> VideoFlow:
    """Load a video flow from JSON.

    Args:
        path: Path to video-flow.json

    Returns:
        Parsed VideoFlow.

    Raises:
        FlowError: If the file is missing or malformed.
    """
    if not path.exists():
        raise FlowError(f"Video flow not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise FlowError(f"Invalid JSON in {path}: {e}") from e

    return VideoFlow.from_dict(data)


@dataclass
class SuggestedQuestion:
    """A static prompt shown before any video is chosen."""

    text: str
    video_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"text": self.text, "videoId": self.video_id}


def load_suggested_questions(path: Path) -> list[SuggestedQuestion]:
    """Load suggested questions; a missing file yields an empty list."""
    if not path.exists():
        return []

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    return [
        SuggestedQuestion(text=q["text"], video_id=q.get("videoId"))
        for q in data.get("questions", [])
        if q.get("text")
    ]
