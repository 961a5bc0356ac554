"""
Spoken summary of a generated outline.
"""

from ..models.course import GeneratedCourseOutline

HIGHLIGHTED_MODULES = 3


def create_outline_summary(outline: GeneratedCourseOutline) -> str:
    """Render the fixed-template overview read back after an outline is created."""
    module_count = len(outline.modules)

    summary = (
        f'Here\'s a quick overview of your "{outline.title}" course:\n\n'
        f"This {outline.total_duration} course is designed for {outline.target_audience.lower()}. "
    )

    if module_count > 0:
        summary += f"It contains {module_count} main modules with {outline.lesson_count} lessons total. "

        key_modules = ", ".join(
            f"Module {index}: {module.title}"
            for index, module in enumerate(outline.modules[:HIGHLIGHTED_MODULES], start=1)
        )
        summary += f"The main modules cover: {key_modules}"

        if module_count > HIGHLIGHTED_MODULES:
            summary += f" and {module_count - HIGHLIGHTED_MODULES} additional modules"
        summary += ". "

    summary += (
        "The full detailed outline is available for you to review and edit. "
        "Would you like me to help you modify any specific sections or create additional content?"
    )
    return summary
