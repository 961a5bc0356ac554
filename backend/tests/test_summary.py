"""
Unit tests for the spoken outline summary.
"""

from coursepilot.models.course import CourseOutlineModule, GeneratedCourseOutline
from coursepilot.voice.summary import create_outline_summary


def test_summary_with_many_modules(sample_outline):
    summary = create_outline_summary(sample_outline)

    assert summary == (
        'Here\'s a quick overview of your "Knife Sharpening Fundamentals" course:\n\n'
        "This 4 hours course is designed for home cooks. "
        "It contains 4 main modules with 6 lessons total. "
        "The main modules cover: Module 1: Steel and Edges, Module 2: Whetstones, "
        "Module 3: Honing and 1 additional modules. "
        "The full detailed outline is available for you to review and edit. "
        "Would you like me to help you modify any specific sections or create additional content?"
    )


def test_summary_with_few_modules():
    outline = GeneratedCourseOutline(
        title="Intro",
        total_duration="1 hour",
        target_audience="Beginners",
        modules=[CourseOutlineModule(title="Basics"), CourseOutlineModule(title="Next Steps")],
    )
    summary = create_outline_summary(outline)

    assert "It contains 2 main modules with 0 lessons total. " in summary
    assert "The main modules cover: Module 1: Basics, Module 2: Next Steps. " in summary
    assert "additional modules" not in summary


def test_summary_without_modules():
    outline = GeneratedCourseOutline(
        title="Empty", total_duration="", target_audience="Everyone", modules=[]
    )
    summary = create_outline_summary(outline)

    assert "main modules" not in summary
    assert "This  course is designed for everyone. The full detailed outline" in summary
