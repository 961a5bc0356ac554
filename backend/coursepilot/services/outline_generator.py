"""
Course Outline Generator - Drafts structured course outlines with the LLM.
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from ..config import settings
from ..llm.base import LLMProvider, LLMMessage
from ..models.course import CourseGenerationRequest, GeneratedCourseOutline

logger = logging.getLogger(__name__)


OUTLINE_SYSTEM_PROMPT = """You are an expert instructional designer and course creator. Your task is to create comprehensive, professional course outlines that follow pedagogical best practices.

You will receive a course description and create a detailed, structured course outline. The outline should be practical, engaging, and suitable for the target audience.

Please respond with a JSON object following this exact structure:
{
  "title": "Course Title",
  "description": "Comprehensive course description",
  "targetAudience": "Who this course is for",
  "totalDuration": "Total course duration",
  "courseType": "Format type (workshop, online course, etc.)",
  "learningObjectives": ["Objective 1", "Objective 2", ...],
  "modules": [
    {
      "title": "Module Title",
      "duration": "Module duration",
      "description": "Module description",
      "learningObjectives": ["Module objective 1", ...],
      "lessons": [
        {
          "title": "Lesson Title",
          "duration": "Lesson duration",
          "description": "Lesson description",
          "activities": ["Activity 1", "Activity 2"],
          "format": ["Video", "Interactive", "Q&A"]
        }
      ],
      "activities": [
        {"type": "Exercise/Quiz/Discussion", "title": "Activity Title", "description": "Activity description"}
      ],
      "resources": [
        {"type": "PDF/Link/Tool", "title": "Resource Title", "description": "Resource description"}
      ]
    }
  ],
  "assessments": [
    {"type": "Quiz/Assignment/Project", "title": "Assessment Title", "description": "Assessment description"}
  ],
  "resources": [
    {"type": "PDF/Link/Tool", "title": "Resource Title", "description": "Resource description"}
  ]
}

Focus on creating practical, actionable content with clear learning outcomes."""

ENHANCE_SYSTEM_PROMPT = (
    "You are an expert instructional designer. Enhance and expand the given course section "
    "with more detail, practical examples, and engaging activities while maintaining the "
    "original structure and intent."
)


class OutlineGenerationError(Exception):
    """Raised when the LLM cannot produce a usable outline."""


def build_outline_prompt(request: CourseGenerationRequest) -> str:
    """Render the user prompt for an outline request."""
    lines = [
        "Create a comprehensive course outline based on this description:",
        "",
        request.description,
        "",
    ]
    if request.title:
        lines.append(f"Preferred title: {request.title}")
    if request.target_audience:
        lines.append(f"Target audience: {request.target_audience}")
    if request.duration:
        lines.append(f"Preferred duration: {request.duration}")
    if request.course_type:
        lines.append(f"Course type: {request.course_type}")
    lines += [
        "",
        "Please create a detailed, professional course outline with multiple modules, "
        "clear learning objectives, practical activities, and comprehensive resources.",
    ]
    return "\n".join(lines)


def parse_outline(raw: str) -> GeneratedCourseOutline:
    """
    Parse the model's JSON reply into an outline.

    Raises:
        OutlineGenerationError: On invalid JSON or a reply without title/modules
    """
    try:
        data = json.loads(raw or "{}")
    except json.JSONDecodeError as e:
        raise OutlineGenerationError(f"Invalid JSON from outline model: {e}") from e

    if not isinstance(data, dict) or not data.get("title") or not data.get("modules"):
        raise OutlineGenerationError("Invalid response format from outline model")

    try:
        return GeneratedCourseOutline.model_validate(data)
    except ValidationError as e:
        raise OutlineGenerationError(f"Outline does not match the expected schema: {e}") from e


class CourseOutlineGenerator:
    """
    Generates course outlines through the configured LLM provider.
    """

    def __init__(
        self,
        llm_provider: Optional[LLMProvider],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ):
        self._llm_provider = llm_provider
        self.temperature = temperature if temperature is not None else settings.outline_temperature
        self.max_tokens = max_tokens or settings.outline_max_tokens

    async def generate(self, request: CourseGenerationRequest) -> GeneratedCourseOutline:
        """
        Draft an outline for the request.

        Raises:
            OutlineGenerationError: If no LLM is configured, the call fails, or the reply is unusable
        """
        if self._llm_provider is None:
            raise OutlineGenerationError(
                "Failed to generate course outline: LLM not configured. "
                "Set LLM_API_KEY or OPENAI_API_KEY in environment."
            )

        messages = [
            LLMMessage.text("system", OUTLINE_SYSTEM_PROMPT),
            LLMMessage.text("user", build_outline_prompt(request)),
        ]

        try:
            response = await self._llm_provider.chat_completion(
                messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                json_mode=True,
            )
            outline = parse_outline(response.content)
        except OutlineGenerationError as e:
            logger.error(f"Error generating course outline: {e}")
            raise OutlineGenerationError(f"Failed to generate course outline: {e}") from e
        except Exception as e:
            logger.error(f"Error generating course outline: {e}", exc_info=True)
            raise OutlineGenerationError(f"Failed to generate course outline: {e}") from e

        logger.info(
            f"Generated course outline: {outline.title}",
            extra={"extra_fields": {
                "modules": len(outline.modules),
                "lessons": outline.lesson_count,
            }}
        )
        return outline

    async def enhance_section(self, section_content: str, context: str = "") -> str:
        """
        Expand one outline section with more detail, examples and activities.

        Returns:
            The enhanced text, or the section unchanged when the model returns nothing

        Raises:
            OutlineGenerationError: If no LLM is configured or the call fails
        """
        if self._llm_provider is None:
            raise OutlineGenerationError(
                "Failed to enhance section: LLM not configured. "
                "Set LLM_API_KEY or OPENAI_API_KEY in environment."
            )

        messages = [
            LLMMessage.text("system", ENHANCE_SYSTEM_PROMPT),
            LLMMessage.text(
                "user",
                f"Context: {context}\n\nSection to enhance:\n{section_content}\n\n"
                "Please provide an enhanced version with more detail, practical examples, "
                "and specific activities."
            ),
        ]

        try:
            response = await self._llm_provider.chat_completion(
                messages,
                temperature=settings.enhance_temperature,
                max_tokens=settings.enhance_max_tokens,
            )
        except Exception as e:
            logger.error(f"Error enhancing outline section: {e}", exc_info=True)
            raise OutlineGenerationError(f"Failed to enhance section: {e}") from e

        return response.content or section_content
