# letteros/models/planning.py
import re
from enum import Enum
from typing import Annotated, Optional, List, Literal, Union, Dict, Any

from pydantic import AliasChoices, Field, field_validator
from letteros.models.base import CamelModel
from letteros.models.launch_content import LaunchContext

class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"

class ChatMessage(CamelModel):
    role: ChatRole
    text: str = Field(..., validation_alias=AliasChoices("text", "content"))

class NewsletterPlan(CamelModel):
    number: int
    subject: str = ""
    main_point: str = ""
    target_belief: str = ""
    proof: str = ""
    cta: str = ""
    experience_to_use: Optional[str] = None

PLAN_FIELDS = ("subject", "main_point", "target_belief", "experience_to_use", "proof", "cta")

class PlanningChatRequest(CamelModel):
    launch_content: LaunchContext
    chat_history: List[ChatMessage] = Field(default_factory=list)
    newsletter_count: int = Field(3, ge=1, le=5)
    force_complete: bool = False

class QuestionResult(CamelModel):
    type: Literal["question"] = "question"
    question: str
    reason: str = ""
    turn_count: int = 0

class ProposalResult(CamelModel):
    type: Literal["proposal"] = "proposal"
    newsletters: List[NewsletterPlan]
    collected_experiences: str = ""
    turn_count: int = 0
    forced: bool = False

PlanningResult = Annotated[Union[QuestionResult, ProposalResult], Field(discriminator="type")]

class CountRequest(CamelModel):
    launch_content: LaunchContext

class CountOption(CamelModel):
    count: int
    name: str
    description: str = ""

class CountSuggestion(CamelModel):
    recommended: int = Field(..., ge=1, le=5)
    reasoning: str = ""
    options: List[CountOption] = Field(default_factory=list)

class ModifyPlanRequest(CamelModel):
    action: Literal["modify", "alternatives"] = "modify"
    plan: NewsletterPlan
    field: str
    instruction: str = ""
    launch_content: LaunchContext = Field(default_factory=LaunchContext)
    collected_experiences: str = ""

    @field_validator("field")
    @classmethod
    def _known_plan_field(cls, value: str) -> str:
        # Clients send either mainPoint or main_point
        name = re.sub(r"(?<!^)(?=[A-Z])", "_", value).lower()
        if name not in PLAN_FIELDS:
            raise ValueError(f"Unknown plan field: {value}")
        return name

class Alternative(CamelModel):
    value: str
    reason: str = ""

class ModifyPlanResponse(CamelModel):
    success: bool = True
    modified_value: Optional[str] = None
    alternatives: Optional[List[Alternative]] = None

class SeriesRequest(CamelModel):
    launch_content: LaunchContext
    newsletter_count: int = Field(..., ge=1, le=5)
    newsletter_plans: List[NewsletterPlan] = Field(..., min_length=1)
    collected_experiences: str = ""
    chat_history: List[ChatMessage] = Field(default_factory=list)

class GeneratedNewsletter(CamelModel):
    number: int
    subject: str
    body: str
    word_count: int
    quality_check: Dict[str, Any] = Field(default_factory=dict)

class SeriesResponse(CamelModel):
    success: bool = True
    newsletters: List[GeneratedNewsletter]
    total_count: int
