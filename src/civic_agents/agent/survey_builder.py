"""
Survey builder: a single-shot agent that designs a community survey.

Unlike the tool-calling profiles, this sends one request with no tools and a system prompt, then
validates the JSON the model writes into a :class:`GeneratedSurvey`.
"""

import asyncio
import json
import logging
import re
from enum import Enum
from typing import (
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
)

from civic_agents.agent.gateway import BaseGateway
from civic_agents.config import settings
from civic_agents.core.errors import (
    GatewayError,
    SurveyGenerationError,
)
from civic_agents.core.schema import UserTurn
from civic_agents.tools import ToolCatalog

logger = logging.getLogger(__name__)

_NO_TOOLS = ToolCatalog([])


# ---------------------------------------------------------------------------
# Survey models
# ---------------------------------------------------------------------------
class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    CHECKBOX = "checkbox"
    TEXT = "text"
    LONG_TEXT = "long_text"
    RATING = "rating"
    DROPDOWN = "dropdown"
    PRIORITY_RANKING = "priority_ranking"


class SurveyQuestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_text: str = Field(..., alias="questionText")
    question_type: QuestionType = Field(..., alias="questionType")
    description: Optional[str] = None
    options: Optional[List[str]] = None
    is_required: bool = Field(False, alias="isRequired")
    order_index: int = Field(0, alias="orderIndex")


class GeneratedSurvey(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    intro_text: str = Field("", alias="introText")
    outro_text: str = Field("", alias="outroText")
    primary_color: str = Field("#3b82f6", alias="primaryColor")
    questions: List[SurveyQuestion] = Field(default_factory=list)
    reasoning: Optional[str] = None


class PointOfView(str, Enum):
    MUNICIPALITY_TO_RESIDENT = "municipality_to_resident"
    RESIDENT_TO_MUNICIPALITY = "resident_to_municipality"
    NEUTRAL_FACILITATOR = "neutral_facilitator"


class SurveyRequest(BaseModel):
    prompt: str = Field(..., min_length=1, examples=["Create a survey about park safety concerns"])
    point_of_view: str = PointOfView.MUNICIPALITY_TO_RESIDENT.value


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------
POV_GUIDANCE = {
    PointOfView.MUNICIPALITY_TO_RESIDENT: """\
Survey POV: Municipality asking residents for feedback.
- Use "our community", "our services", "we provide"
- Frame questions from the perspective of a municipality asking residents for input
- Example: "How satisfied are you with our park maintenance?\"""",
    PointOfView.RESIDENT_TO_MUNICIPALITY: """\
Survey POV: Residents requesting improvements from municipality.
- Use "I need", "My neighborhood needs", "I would like to see"
- Frame questions from the perspective of residents identifying needs
- Example: "What improvements do you need in your neighborhood?\"""",
    PointOfView.NEUTRAL_FACILITATOR: """\
Survey POV: Neutral third party collecting community data.
- Use objective, neutral language
- Avoid possessive terms like "our" or "my"
- Example: "How would you rate the quality of park maintenance in the community?\"""",
}

SYSTEM_PROMPT_TEMPLATE = """\
You are an expert survey designer for municipal governments and community organizations. Your role \
is to create effective, well-structured surveys based on user descriptions.

{pov}

AVAILABLE QUESTION TYPES:
- multiple_choice: Radio buttons (select one option)
- checkbox: Checkboxes (select multiple options)
- text: Short text input (single line)
- long_text: Long text input (paragraph)
- rating: 1-5 star rating scale
- dropdown: Dropdown select menu
- priority_ranking: Drag-to-rank priority list

SURVEY DESIGN PRINCIPLES:
1. Keep surveys focused and concise (5-15 questions ideal)
2. Start with easy, non-sensitive questions
3. Group related questions together
4. Use clear, unbiased language consistent with the specified POV
5. Provide context/descriptions for complex questions
6. Make strategic questions required (avoid making everything required)
7. Use appropriate question types for the data you need
8. Include demographic questions at the END if needed

RESPONSE FORMAT:
You must respond with a valid JSON object (no markdown, no code blocks) with this exact structure:
{{
  "title": "Survey title",
  "description": "Brief survey description",
  "introText": "Welcome message explaining the survey's purpose",
  "outroText": "Thank you message",
  "primaryColor": "#3b82f6",
  "questions": [
    {{
      "questionText": "Question text here",
      "questionType": "multiple_choice",
      "description": "Optional clarification",
      "options": ["Option 1", "Option 2", "Option 3"],
      "isRequired": true,
      "orderIndex": 0
    }}
  ],
  "reasoning": "Brief explanation of your design choices"
}}"""


def build_system_prompt(point_of_view: str) -> str:
    """Return the system prompt; unknown points of view fall back to municipality_to_resident."""
    try:
        pov = PointOfView(point_of_view)
    except ValueError:
        logger.warning("Unknown survey point of view '%s'; using default", point_of_view)
        pov = PointOfView.MUNICIPALITY_TO_RESIDENT
    return SYSTEM_PROMPT_TEMPLATE.format(pov=POV_GUIDANCE[pov])


def _sanitize_json_string(content: str) -> str:
    """Strip markdown fences and return the outermost ``{...}`` object in *content*."""
    if "```" in content:
        match = re.search(r"```(?:json)?\s*(.+?)```", content, re.DOTALL)
        if match:
            content = match.group(1).strip()

    # Remove control characters except whitespace
    content = "".join(ch for ch in content if ch >= " " or ch in "\n\r\t")

    open_idx = content.find("{")
    close_idx = content.rfind("}")
    if open_idx < 0 or close_idx < open_idx:
        raise SurveyGenerationError("Failed to extract JSON from response")
    return content[open_idx : close_idx + 1]


def parse_survey(text: str) -> GeneratedSurvey:
    """Validate the model's text into a :class:`GeneratedSurvey`."""
    cleaned = _sanitize_json_string(text)
    try:
        return GeneratedSurvey.model_validate(json.loads(cleaned))
    except json.JSONDecodeError as exc:
        raise SurveyGenerationError(f"Survey response is not valid JSON: {exc}") from exc
    except ValidationError as exc:
        raise SurveyGenerationError(f"Survey response has the wrong shape: {exc}") from exc


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
class SurveyBuilder:
    """Generate surveys from a natural-language prompt via one gateway call."""

    def __init__(self, gateway: BaseGateway, timeout: float | None = None) -> None:
        self.gateway = gateway
        self.timeout = settings.GATEWAY_TIMEOUT if timeout is None else timeout

    async def generate(
        self,
        prompt: str,
        point_of_view: str = PointOfView.MUNICIPALITY_TO_RESIDENT.value,
    ) -> GeneratedSurvey:
        """
        Ask the model for a survey.

        Raises
        ------
        GatewayError
            The model call failed.
        SurveyGenerationError
            The reply held no text, or no JSON object matching :class:`GeneratedSurvey`.
        """
        try:
            completion = await asyncio.wait_for(
                self.gateway.complete(
                    [UserTurn(content=prompt)],
                    _NO_TOOLS,
                    system=build_system_prompt(point_of_view),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise GatewayError(f"Model gateway timed out after {self.timeout}s") from exc

        text = completion.assistant_turn.first_text()
        if text is None:
            raise SurveyGenerationError("Unexpected response type from model: no text block")

        survey = parse_survey(text)
        logger.info(
            "Generated survey '%s' with %d questions (%d units used)",
            survey.title,
            len(survey.questions),
            completion.usage.total,
        )
        return survey
