"""Keyword matcher for routing free-text questions to FAQ videos.

Matching stages, first hit wins:
    1. Generic patterns  - trigger phrases mapped to a target FAQ question
    2. Direct match      - user question and FAQ question contain each other
    3. Keyword score     - shared keywords / FAQ question keywords
    4. Fallback video    - the clip flagged isFallback, if any

All matching is deterministic - same question always gives the same video.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from .video_flow import VideoEntry, VideoFlow


# =============================================================================
# PATTERNS
# =============================================================================
# Target FAQ question phrase -> trigger phrases found in user questions.
# Order matters: earlier targets win when several triggers match.

GENERIC_PATTERNS = {
    "what is qudemo": [
        "what is qudemo", "what is this", "what is it", "tell me about",
        "what does this do", "what is this about", "explain this",
        "what are you", "what do you do",
    ],
    "how does qudemo work": [
        "how does", "how do i", "how to use", "how it works", "how do you",
    ],
    "who is qudemo for": [
        "who is this for", "who can use", "who should use",
        "target audience", "who needs",
    ],
    "what is the pricing": [
        "how much", "cost", "price", "pricing", "payment", "expensive",
    ],
    "how secure is my data": [
        "secure", "security", "safe", "privacy", "data protection",
    ],
}

STOP_WORDS = frozenset({
    "a", "an", "the", "is", "are", "was", "be", "do", "does", "did", "i",
    "you", "we", "it", "my", "your", "our", "me", "to", "of", "in", "on",
    "for", "and", "or", "with", "what", "how", "who", "why", "can", "this",
    "that", "so", "about",
})

CONFIDENCE_HIGH = "high"
CONFIDENCE_MEDIUM = "medium"
CONFIDENCE_AI = "ai"
CONFIDENCE_FALLBACK = "fallback"


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class MatchResult:
    """Outcome of matching a user question."""

    matched: bool
    video_id: Optional[str] = None
    question: Optional[str] = None
    confidence: Optional[str] = None
    is_fallback: bool = False
    trace: list[str] = field(default_factory=list)  # Stages that were tried

    def to_dict(self) -> dict:
        """Convert to the /api/match-question response body."""
        if not self.matched:
            return {"matched": False}

        data = {
            "matched": True,
            "videoId": self.video_id,
            "question": self.question,
            "confidence": self.confidence,
        }
        if self.is_fallback:
            data["isFallback"] = True
        return data


def keywords(text: str) -> set[str]:
    """Lowercase alphanumeric tokens minus stop words."""
    return {
        token for token in re.findall(r"[a-z0-9]+", text.lower())
        if token not in STOP_WORDS
    }


# =============================================================================
# QUESTION MATCHER
# =============================================================================

class QuestionMatcher:
    """Matches user questions against the FAQ questions of a video flow."""

    def __init__(
        self,
        flow: VideoFlow,
        generic_patterns: Optional[dict[str, list[str]]] = None,
        min_keyword_score: float = 0.5,
    ):
        self.flow = flow
        self.generic_patterns = (
            GENERIC_PATTERNS if generic_patterns is None else generic_patterns
        )
        self.min_keyword_score = min_keyword_score

    def match(self, user_question: str) -> MatchResult:
        """Match a question to a video.

        Args:
            user_question: Free text typed or spoken by the user

        Returns:
            MatchResult; ``matched`` is False when nothing fits and the
            flow has no fallback video.
        """
        query = (user_question or "").lower().strip()
        if not query:
            return MatchResult(matched=False)

        trace = []

        trace.append("generic")
        video = self._match_generic(query)
        if video:
            return self._result(video, CONFIDENCE_HIGH, trace)

        trace.append("direct")
        video = self._match_direct(query)
        if video:
            return self._result(video, CONFIDENCE_HIGH, trace)

        trace.append("keywords")
        video = self._match_keywords(query)
        if video:
            return self._result(video, CONFIDENCE_MEDIUM, trace)

        trace.append("fallback")
        video = self.flow.fallback()
        if video:
            result = self._result(video, CONFIDENCE_FALLBACK, trace)
            result.is_fallback = True
            return result

        return MatchResult(matched=False, trace=trace)

    def find_matching_video(self, user_question: str) -> Optional[VideoEntry]:
        """Return the matched video entry, or None."""
        result = self.match(user_question)
        if result.matched:
            return self.flow.get(result.video_id)
        return None

    def _result(self, video: VideoEntry, confidence: str, trace: list[str]) -> MatchResult:
        return MatchResult(
            matched=True,
            video_id=video.id,
            question=video.question,
            confidence=confidence,
            trace=trace,
        )

    def _match_generic(self, query: str) -> Optional[VideoEntry]:
        for target, triggers in self.generic_patterns.items():
            if not any(trigger in query for trigger in triggers):
                continue
            for video in self.flow.questions():
                if target in video.question.lower():
                    return video
        return None

    def _match_direct(self, query: str) -> Optional[VideoEntry]:
        for video in self.flow.questions():
            faq = video.question.lower().strip()
            if faq in query or query in faq:
                return video
        return None

    def _match_keywords(self, query: str) -> Optional[VideoEntry]:
        query_words = keywords(query)
        if not query_words:
            return None

        best, best_score = None, 0.0
        for video in self.flow.questions():
            faq_words = keywords(video.question)
            if not faq_words:
                continue
            score = len(query_words & faq_words) / len(faq_words)
            # Strict > keeps the earliest video on ties
            if score > best_score:
                best, best_score = video, score

        if best_score >= self.min_keyword_score:
            return best
        return None
