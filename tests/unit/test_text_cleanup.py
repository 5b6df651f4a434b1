"""
Unit tests for narration cleanup rules.
"""

import re
import pytest

from favcast.synthesis.text_cleanup import NARRATION_CLEANUP_RULES, apply_rules, clean_narration


@pytest.mark.unit
class TestCleanNarration:
    """Tests for clean_narration."""

    @pytest.mark.parametrize("text", [
        "Hello everyone, Rust 2.0 shipped this week.",
        "Good day! Rust 2.0 shipped this week.",
        "Hey there. Rust 2.0 shipped this week.",
        "Welcome back, Rust 2.0 shipped this week.",
    ])
    def test_strips_leading_greeting(self, text):
        assert clean_narration(text) == "Rust 2.0 shipped this week."

    @pytest.mark.parametrize("ending", [
        "In summary, it was a busy week.",
        "To conclude, lots happened.",
        "In conclusion, that is the news.",
        "Finally, thanks for listening.",
    ])
    def test_strips_trailing_conclusion(self, ending):
        text = f"OpenAI released a new model. Anthropic answered quickly. {ending}"
        assert clean_narration(text) == "OpenAI released a new model. Anthropic answered quickly."

    def test_strips_concluding_paragraph(self):
        text = "Django 6 is out.\n\nTo sum up, a good week overall."
        assert clean_narration(text) == "Django 6 is out."

    @pytest.mark.parametrize("text,expected", [
        (
            "Finally, Anthropic shipped Claude 5 and OpenAI released GPT-6 for every developer.",
            "Anthropic shipped Claude 5 and OpenAI released GPT-6 for every developer.",
        ),
        (
            "Vercel shipped a CLI.\n\nFinally, Anthropic shipped Claude 5 with a 1M context window.",
            "Vercel shipped a CLI.\n\nAnthropic shipped Claude 5 with a 1M context window.",
        ),
        (
            "Django 6 is out. To sum up, a good week for Python.",
            "Django 6 is out. A good week for Python.",
        ),
    ])
    def test_keeps_news_after_concluding_word(self, text, expected):
        assert clean_narration(text) == expected

    @pytest.mark.parametrize("ending", [
        "That's all for today.",
        "Thanks for listening, see you soon.",
        "Today's topics were Rust, Go and Zig.",
    ])
    def test_strips_trailing_sign_off(self, ending):
        text = f"Go 1.25 added a new GC. {ending}"
        assert clean_narration(text) == "Go 1.25 added a new GC."

    def test_collapses_blank_lines(self):
        assert clean_narration("One.\n\n\n\n\nTwo.") == "One.\n\nTwo."

    def test_keeps_ordinary_text(self):
        text = "Vercel shipped a new CLI.\n\nThe Astro team published a migration guide."
        assert clean_narration(text) == text

    def test_keeps_mid_text_conclusion_words(self):
        """Test 'finally' inside an earlier sentence is left alone."""
        text = "Bun finally supports Windows.\n\nDeno 3 also landed."
        assert clean_narration(text) == text


@pytest.mark.unit
class TestRuleTable:
    """Tests for the rule table itself."""

    def test_rules_are_compiled_pairs(self):
        for pattern, replacement in NARRATION_CLEANUP_RULES:
            assert isinstance(pattern, re.Pattern)
            assert isinstance(replacement, str) or callable(replacement)

    def test_apply_custom_rules(self):
        rules = [(re.compile(r"foo"), "bar")]
        assert apply_rules("foo foo", rules) == "bar bar"
