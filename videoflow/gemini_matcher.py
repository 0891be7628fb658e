"""Gemini AI question matcher.

Uses Google Gemini API to pick which FAQ question a free-text user
question is asking. Callers fall back to the keyword matcher on failure.
"""

import re
from typing import Optional

import requests

from .config import get_gemini_api_key
from .question_matcher import CONFIDENCE_AI, MatchResult
from .video_flow import VideoFlow


class GeminiError(Exception):
    """Raised when the Gemini API call or its response fails."""


class GeminiMatcher:
    """Uses Gemini AI to map a user question onto the FAQ list."""

    API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gemini-2.0-flash",
        timeout: float = 10,
    ):
        """Initialize with API key from argument or environment."""
        self.api_key = api_key or get_gemini_api_key()
        self.model = model
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check if Gemini API is available."""
        return bool(self.api_key)

    def build_prompt(self, user_question: str, flow: VideoFlow) -> str:
        questions = flow.questions()
        numbered = "\n".join(f"{i}. {v.question}" for i, v in enumerate(questions, 1))

        return f"""You route visitor questions to FAQ videos.

Visitor question: "{user_question}"

Available FAQ questions:
{numbered}

Reply with ONLY the number of the FAQ question that best answers the
visitor's question, or NONE if none of them fits."""

    def match(self, user_question: str, flow: VideoFlow) -> MatchResult:
        """Match a question with Gemini.

        Args:
            user_question: The user's free-text question.
            flow: Video flow whose FAQ questions are candidates.

        Returns:
            MatchResult with confidence "ai", or matched=False for NONE.

        Raises:
            GeminiError: If the API is unavailable or the reply is unusable.
        """
        if not self.is_available():
            raise GeminiError("Gemini API key not configured")

        questions = flow.questions()
        if not questions:
            return MatchResult(matched=False)

        payload = {
            "contents": [{"parts": [{"text": self.build_prompt(user_question, flow)}]}],
            "generationConfig": {
                "temperature": 0.0,
                "maxOutputTokens": 10,
            },
        }

        try:
            response = requests.post(
                self.API_URL.format(model=self.model),
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
            text = result["candidates"][0]["content"]["parts"][0]["text"]
        except requests.RequestException as e:
            raise GeminiError(f"Gemini request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GeminiError(f"Unexpected Gemini response: {e}") from e

        choice = self.parse_choice(text, len(questions))
        if choice is None:
            return MatchResult(matched=False, trace=["ai"])

        video = questions[choice - 1]
        return MatchResult(
            matched=True,
            video_id=video.id,
            question=video.question,
            confidence=CONFIDENCE_AI,
            trace=["ai"],
        )

    @staticmethod
    def parse_choice(text: str, count: int) -> Optional[int]:
        """Extract a 1-based question number from the model reply.

        Returns:
            The number, or None if the model answered NONE.

        Raises:
            GeminiError: If the reply holds no usable number.
        """
        if not isinstance(text, str):
            raise GeminiError(f"Reply text is not a string: {text!r}")

        # Strip markdown code blocks
        if "```" in text:
            text = text.replace("```text", "").replace("```", "")
        text = text.strip()

        if text.upper().startswith("NONE"):
            return None

        match = re.search(r"\d+", text)
        if not match:
            raise GeminiError(f"No question number in reply: {text!r}")

        choice = int(match.group(0))
        if not 1 <= choice <= count:
            raise GeminiError(f"Question number out of range: {choice}")
        return choice
