"""Video flow, question matching and playback for the video FAQ player."""

from .gemini_matcher import GeminiError, GeminiMatcher
from .player import FlowPlayer
from .question_matcher import MatchResult, QuestionMatcher
from .video_flow import (
    DEFAULT_VIDEO_FLOW,
    FlowError,
    NextQuestion,
    SuggestedQuestion,
    VideoEntry,
    VideoFlow,
    load_suggested_questions,
    load_video_flow,
)

__all__ = [
    "DEFAULT_VIDEO_FLOW",
    "FlowError",
    "FlowPlayer",
    "GeminiError",
    "GeminiMatcher",
    "MatchResult",
    "NextQuestion",
    "QuestionMatcher",
    "SuggestedQuestion",
    "VideoEntry",
    "VideoFlow",
    "load_suggested_questions",
    "load_video_flow",
]
