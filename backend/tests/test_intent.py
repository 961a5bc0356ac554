"""
Unit tests for the keyword intent heuristics.
"""

import pytest

from coursepilot.voice.intent import is_course_creation_request, is_summary_request


class TestCourseCreationIntent:

    @pytest.mark.parametrize("text", [
        "Can you create a course on Python basics?",
        "I want to BUILD a training program",
        "Help me design a workshop for managers",
        "Let's develop a curriculum for nurses",
        "Please plan a few lessons about budgeting",
        "make an outline for my class",
    ])
    def test_course_and_action_keywords(self, text):
        assert is_course_creation_request(text)

    @pytest.mark.parametrize("text", [
        "What makes a good quiz?",
        "Tell me more about this course",
        "Create something fun",
        "",
    ])
    def test_needs_both_keyword_groups(self, text):
        assert not is_course_creation_request(text)

    def test_substring_matching(self):
        # "masterclass" contains "class", "remake" contains "make"
        assert is_course_creation_request("remake my masterclass")


class TestSummaryIntent:

    @pytest.mark.parametrize("text", [
        "Yes",
        "sure thing",
        "Give me the overview",
        "Can you explain it?",
        "Tell me about the modules",
        "Show me a walkthrough",
    ])
    def test_summary_phrases(self, text):
        assert is_summary_request(text)

    @pytest.mark.parametrize("text", ["No thanks", "What time is it?", ""])
    def test_other_phrases(self, text):
        assert not is_summary_request(text)
