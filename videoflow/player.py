"""Flow player: the branching video FAQ controller without the DOM.

Tracks which clip is playing, the chat transcript, and how clicks and
free-text questions move the viewer through the flow.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from .config import get_default_video_src
from .gemini_matcher import GeminiError, GeminiMatcher
from .question_matcher import CONFIDENCE_FALLBACK, MatchResult, QuestionMatcher
from .video_flow import NextQuestion, SuggestedQuestion, VideoFlow

SENDER_AI = "AI"
SENDER_USER = "User"

SUGGESTED_PAGE_SIZE = 3

WELCOME_MESSAGE = (
    "Welcome to Qudemo! I'm your AI assistant. I can help you understand "
    "our interactive video demos. What would you like to know?"
)
COMPLETION_MESSAGE = (
    "You've reached the end of this demo! Feel free to ask more questions."
)
NOT_SURE_MESSAGE = (
    "I'm not sure about that. You can ask me about Qudemo, pricing, "
    "security, or other features!"
)
FALLBACK_MESSAGE = (
    "I'm not sure about that specific question, but I can help you with "
    "other questions about Qudemo, pricing, security, and features!"
)
NO_VIDEO_MESSAGE = "I couldn't find a matching video. Try asking another question!"
NO_FLOW_MESSAGE = (
    "I understand your question, but I'm having trouble loading the video "
    "content. Please try refreshing the page."
)
COMING_SOON_MESSAGE = (
    "This video will be available soon! We are still creating content "
    "for this question."
)


def resolve_match(
    question: str,
    flow: VideoFlow,
    matcher: QuestionMatcher,
    ai_matcher: Optional[GeminiMatcher] = None,
) -> MatchResult:
    """Match with Gemini when available, otherwise (or on failure) with keywords."""
    if ai_matcher and ai_matcher.is_available():
        try:
            result = ai_matcher.match(question, flow)
            if result.matched:
                return result
        except GeminiError as e:
            print(f"[MATCH] AI matching failed, using keywords: {e}")

    return matcher.match(question)


@dataclass
class ChatMessage:
    """One line in the chat transcript."""

    sender: str
    text: str
    time: str

    def to_dict(self) -> dict:
        return {"sender": self.sender, "text": self.text, "time": self.time}


class FlowPlayer:
    """Moves through a video flow in response to viewer actions."""

    def __init__(
        self,
        flow: Optional[VideoFlow],
        suggested: Sequence[SuggestedQuestion] = (),
        matcher: Optional[QuestionMatcher] = None,
        ai_matcher: Optional[GeminiMatcher] = None,
        default_video_src: Optional[str] = None,
    ):
        self.flow = flow
        self.suggested = list(suggested)
        self.matcher = matcher or (QuestionMatcher(flow) if flow else None)
        self.ai_matcher = ai_matcher
        self.default_video_src = default_video_src or get_default_video_src()

        self.current_index = 0
        self.now_playing: Optional[str] = None
        self.finished = False
        self.messages: list[ChatMessage] = []

    # -------------------------------------------------------------------------
    # Chat
    # -------------------------------------------------------------------------

    def add_message(self, text: str, sender: str = SENDER_AI) -> ChatMessage:
        message = ChatMessage(
            sender=sender,
            text=text,
            time=datetime.now().strftime("%H:%M"),
        )
        self.messages.append(message)
        return message

    def suggested_page(self, show_all: bool = False) -> tuple[list[SuggestedQuestion], bool]:
        """Suggested questions to display.

        Returns:
            (questions, has_more) - the first page plus whether a
            "View More" button is needed.
        """
        if show_all:
            return list(self.suggested), False
        page = self.suggested[:SUGGESTED_PAGE_SIZE]
        return page, len(self.suggested) > SUGGESTED_PAGE_SIZE

    # -------------------------------------------------------------------------
    # Playback
    # -------------------------------------------------------------------------

    @property
    def has_flow(self) -> bool:
        return bool(self.flow and self.flow.videos)

    @property
    def progress(self) -> tuple[int, int]:
        """(current, total), 1-based, as shown in the progress counter."""
        if not self.has_flow:
            return 1, 1
        return self.current_index + 1, len(self.flow)

    def start(self) -> None:
        """Show the welcome message and play the first clip."""
        self.add_message(WELCOME_MESSAGE)
        if self.has_flow:
            self.play(0)
        else:
            self.play_default_video()

    def play_default_video(self) -> None:
        self.current_index = 0
        self.now_playing = self.default_video_src

    def play(self, index: int) -> None:
        if not self.has_flow:
            self.play_default_video()
            return

        if index < 0:
            return

        if index >= len(self.flow):
            self.show_completion()
            return

        self.current_index = index
        self.now_playing = self.flow.videos[index].src
        self.finished = False

    def show_completion(self) -> None:
        self.finished = True
        self.add_message(COMPLETION_MESSAGE)

    def on_video_ended(self) -> list[NextQuestion]:
        """Handle the end of the current clip.

        Returns:
            Follow-up questions to offer; empty when the flow is complete.
        """
        if not self.has_flow or self.finished:
            return []

        current = self.flow.videos[self.current_index]
        if current.next_questions:
            return list(current.next_questions)

        self.show_completion()
        return []

    def on_question_clicked(self, question: NextQuestion) -> bool:
        """Follow a clicked follow-up question. Returns True if a clip started.

        Unknown or empty targets leave the chat and playback untouched.
        """
        if not self.play_video_id(question.next_video):
            return False
        self.add_message(question.text, SENDER_USER)
        return True

    def on_suggested_question_clicked(self, video_id: Optional[str]) -> bool:
        if self.play_video_id(video_id):
            return True
        self.add_message(COMING_SOON_MESSAGE)
        return False

    def play_video_id(self, video_id: Optional[str]) -> bool:
        if not video_id or not self.has_flow:
            return False
        index = self.flow.index_of(video_id)
        if index == -1:
            return False
        self.play(index)
        return True

    # -------------------------------------------------------------------------
    # Free-text questions
    # -------------------------------------------------------------------------

    def ask(self, question: str) -> Optional[str]:
        """Route a typed or spoken question.

        Returns:
            The AI reply added to the chat, or None for a blank question.
        """
        question = (question or "").strip()
        if not question:
            return None

        self.add_message(question, SENDER_USER)

        if not self.has_flow:
            return self.add_message(NO_FLOW_MESSAGE).text

        result = resolve_match(question, self.flow, self.matcher, self.ai_matcher)
        if not result.matched:
            return self.add_message(NOT_SURE_MESSAGE).text

        video = self.flow.get(result.video_id)
        if not video:
            return self.add_message(NO_VIDEO_MESSAGE).text

        if result.is_fallback or result.confidence == CONFIDENCE_FALLBACK:
            reply = FALLBACK_MESSAGE
        else:
            reply = video.answer or f"Playing video: {video.title or video.question}"

        self.add_message(reply)
        self.play(self.flow.index_of(video.id))
        return reply
