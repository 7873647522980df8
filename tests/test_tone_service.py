"""Tests for tone selection and downgrade."""

import pytest

from src.core.models.chat import Tone
from src.core.services.tone_service import PERSONAL_DISABLED_NOTE, pick_tone, resolve_tone


class TestPickTone:
    def test_story_request_is_narrative(self):
        assert pick_tone("tell me the story behind the pilot training fix", None, False) is Tone.NARRATIVE

    def test_personal_request_without_flag_is_professional(self):
        assert pick_tone("share your very personal story", None, False) is Tone.PROFESSIONAL

    def test_personal_request_with_flag_is_personal(self):
        assert pick_tone("share your very personal story", None, True) is Tone.PERSONAL

    @pytest.mark.parametrize(
        "question",
        [
            "How did you decide on the architecture?",
            "How did your team decide to pivot?",
            "Walk me through the launch",
            "Why did you leave?",
            "What happened after the pilot?",
        ],
    )
    def test_narrative_cues(self, question):
        assert pick_tone(question) is Tone.NARRATIVE

    def test_project_scope_is_narrative(self):
        assert pick_tone("what were the metrics", route_scope="project-cns") is Tone.NARRATIVE

    def test_other_scope_is_professional(self):
        assert pick_tone("what were the metrics", route_scope="resume") is Tone.PROFESSIONAL

    def test_narrative_wins_over_personal(self):
        assert pick_tone("walk me through your personal journey", None, True) is Tone.NARRATIVE

    def test_blank_question(self):
        assert pick_tone("") is Tone.PROFESSIONAL


class TestResolveTone:
    def test_personal_downgraded_when_disabled(self):
        assert resolve_tone(Tone.PERSONAL, False) == (Tone.PROFESSIONAL, PERSONAL_DISABLED_NOTE)

    def test_personal_kept_when_enabled(self):
        assert resolve_tone(Tone.PERSONAL, True) == (Tone.PERSONAL, None)

    @pytest.mark.parametrize("tone", [Tone.PROFESSIONAL, Tone.NARRATIVE])
    def test_other_tones_untouched(self, tone):
        assert resolve_tone(tone, False) == (tone, None)
