"""
Keyword heuristics that steer a voice utterance.

Plain substring matching on the lower-cased text, so "masterclass" counts as
"class" and "remake" as "make". No model call is involved.
"""

COURSE_KEYWORDS = (
    'course', 'lesson', 'module', 'curriculum', 'training', 'learning',
    'teach', 'education', 'outline', 'syllabus', 'workshop', 'class',
)

ACTION_KEYWORDS = ('create', 'build', 'design', 'develop', 'make', 'plan')

SUMMARY_KEYWORDS = (
    'summary', 'walkthrough', 'overview', 'yes', 'sure', 'please',
    'tell me about', 'describe', 'explain', 'give me', 'show me',
)


def _contains_any(text: str, keywords) -> bool:
    return any(keyword in text for keyword in keywords)


def is_course_creation_request(text: str) -> bool:
    """True when the utterance names a course concept and a building verb."""
    lower_text = text.lower()
    return _contains_any(lower_text, COURSE_KEYWORDS) and _contains_any(lower_text, ACTION_KEYWORDS)


def is_summary_request(text: str) -> bool:
    """True when the utterance reads like a request to hear about the last outline."""
    return _contains_any(text.lower(), SUMMARY_KEYWORDS)
