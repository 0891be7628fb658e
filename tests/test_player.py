"""Tests for the flow player."""

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from videoflow.gemini_matcher import GeminiError
from videoflow.player import (
    COMING_SOON_MESSAGE,
    COMPLETION_MESSAGE,
    FALLBACK_MESSAGE,
    NO_FLOW_MESSAGE,
    NO_VIDEO_MESSAGE,
    NOT_SURE_MESSAGE,
    SENDER_USER,
    WELCOME_MESSAGE,
    FlowPlayer,
)
from videoflow.question_matcher import MatchResult
from videoflow.video_flow import NextQuestion, VideoFlow


class StubAIMatcher:
    """Stands in for GeminiMatcher without network access."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def is_available(self):
        return True

    def match(self, question, flow):
        self.calls.append(question)
        if self.error:
            raise self.error
        return self.result


class TestPlayback:
    """Test linear playback and branching."""

    def test_start_plays_first_video(self, sample_flow):
        """start() welcomes the viewer and plays the first clip."""
        player = FlowPlayer(sample_flow)
        player.start()

        assert player.messages[0].text == WELCOME_MESSAGE
        assert player.now_playing == "/videos/video_1.mp4"
        assert player.progress == (1, len(sample_flow))

    def test_start_without_flow_plays_default(self):
        """An empty flow falls back to the default welcome video."""
        player = FlowPlayer(VideoFlow(), default_video_src="https://example.com/intro.mp4")
        player.start()

        assert player.now_playing == "https://example.com/intro.mp4"
        assert player.progress == (1, 1)

    def test_video_end_offers_next_questions(self, sample_flow):
        """Ending a clip returns its follow-up questions."""
        player = FlowPlayer(sample_flow)
        player.start()
        questions = player.on_video_ended()

        assert [q.next_video for q in questions] == ["video_2", "video_3"]
        assert not player.finished

    def test_question_click_branches(self, sample_flow):
        """Clicking a follow-up plays its target and records the click."""
        player = FlowPlayer(sample_flow)
        player.start()
        question = player.on_video_ended()[1]

        assert player.on_question_clicked(question)
        assert player.now_playing == "/videos/video_3.mp4"
        assert player.current_index == 2
        assert player.messages[-1].sender == SENDER_USER

    def test_last_video_completes(self, sample_flow):
        """A clip with no follow-ups completes the flow."""
        player = FlowPlayer(sample_flow)
        player.play(sample_flow.index_of("video_5"))

        assert player.on_video_ended() == []
        assert player.finished
        assert player.messages[-1].text == COMPLETION_MESSAGE

    def test_play_past_end_completes(self, sample_flow):
        """Playing beyond the last index completes instead of failing."""
        player = FlowPlayer(sample_flow)
        player.play(len(sample_flow))
        assert player.finished

    def test_unknown_target_is_ignored(self, sample_flow):
        """Unknown or empty targets leave playback unchanged."""
        player = FlowPlayer(sample_flow)
        player.start()

        assert not player.play_video_id("video_99")
        assert not player.play_video_id(None)
        assert player.current_index == 0

    def test_click_unknown_target_leaves_chat(self, sample_flow):
        """Clicking a follow-up with a missing target changes nothing."""
        player = FlowPlayer(sample_flow)

        assert not player.on_question_clicked(NextQuestion("q", "Ghost?", "video_99"))
        assert not player.on_question_clicked(NextQuestion("q", "Empty?", None))
        assert player.messages == []
        assert player.now_playing is None

    def test_negative_index_ignored(self, sample_flow):
        """Negative indexes do not wrap around to the last clip."""
        player = FlowPlayer(sample_flow)
        player.start()
        player.play(-1)

        assert player.current_index == 0
        assert player.now_playing == "/videos/video_1.mp4"
        assert player.progress == (1, len(sample_flow))

    def test_completion_reported_once(self, sample_flow):
        """Repeated end events on the last clip add one completion message."""
        player = FlowPlayer(sample_flow)
        player.play(sample_flow.index_of("video_5"))

        player.on_video_ended()
        assert player.on_video_ended() == []
        completions = [m for m in player.messages if m.text == COMPLETION_MESSAGE]
        assert len(completions) == 1

    def test_suggested_question_coming_soon(self, sample_flow):
        """Suggestions pointing at missing clips say they are coming soon."""
        player = FlowPlayer(sample_flow)
        assert not player.on_suggested_question_clicked("video_99")
        assert player.messages[-1].text == COMING_SOON_MESSAGE

        assert player.on_suggested_question_clicked("video_4")
        assert player.now_playing == "/videos/video_4.mp4"


class TestSuggestedPage:
    """Test suggested question paging."""

    def test_first_page(self, sample_flow, suggested):
        """Only three suggestions show until View More."""
        player = FlowPlayer(sample_flow, suggested=suggested)
        page, has_more = player.suggested_page()

        assert len(page) == 3
        assert has_more

    def test_show_all(self, sample_flow, suggested):
        """View More reveals every suggestion."""
        player = FlowPlayer(sample_flow, suggested=suggested)
        page, has_more = player.suggested_page(show_all=True)

        assert len(page) == len(suggested)
        assert not has_more


class TestAsk:
    """Test free-text question routing."""

    def test_matched_question_plays_answer(self, sample_flow):
        """A matched question replies with the answer and plays the clip."""
        player = FlowPlayer(sample_flow)
        reply = player.ask("How much does it cost?")

        assert reply == sample_flow.get("video_4").answer
        assert player.now_playing == "/videos/video_4.mp4"
        assert [m.sender for m in player.messages] == ["User", "AI"]

    def test_fallback_reply(self, sample_flow):
        """The fallback clip plays with a 'not sure' reply."""
        player = FlowPlayer(sample_flow)

        assert player.ask("xyzzy") == FALLBACK_MESSAGE
        assert player.now_playing == "/videos/video_fallback.mp4"

    def test_unmatched_reply(self, flow_without_fallback):
        """Without a fallback the canned 'not sure' message is shown."""
        player = FlowPlayer(flow_without_fallback)
        player.start()

        assert player.ask("xyzzy") == NOT_SURE_MESSAGE
        assert player.current_index == 0

    def test_blank_question_ignored(self, sample_flow):
        """Blank questions add nothing to the chat."""
        player = FlowPlayer(sample_flow)
        assert player.ask("   ") is None
        assert player.messages == []

    def test_no_flow(self):
        """Questions without a flow explain the loading problem."""
        player = FlowPlayer(None)
        assert player.ask("What is Qudemo?") == NO_FLOW_MESSAGE

    def test_ai_match_used(self, flow_without_fallback):
        """An available AI matcher decides first."""
        ai = StubAIMatcher(MatchResult(matched=True, video_id="crm", confidence="ai"))
        player = FlowPlayer(flow_without_fallback, ai_matcher=ai)

        assert player.ask("does it talk to my CRM") == "Yes, Salesforce sync is built in."
        assert ai.calls == ["does it talk to my CRM"]

    def test_ai_failure_falls_back_to_keywords(self, sample_flow):
        """A Gemini error degrades to the keyword matcher."""
        ai = StubAIMatcher(error=GeminiError("boom"))
        player = FlowPlayer(sample_flow, ai_matcher=ai)

        player.ask("How much does it cost?")
        assert player.now_playing == "/videos/video_4.mp4"

    def test_ai_unknown_video(self, sample_flow):
        """A match naming a clip that is not in the flow is reported."""
        ai = StubAIMatcher(MatchResult(matched=True, video_id="ghost", confidence="ai"))
        player = FlowPlayer(sample_flow, ai_matcher=ai)

        assert player.ask("anything") == NO_VIDEO_MESSAGE
