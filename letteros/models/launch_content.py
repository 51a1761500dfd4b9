# letteros/models/launch_content.py
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import Field
from letteros.models.base import CamelModel

class GeneratedBy(str, Enum):
    MANUAL = "manual"
    AI = "ai"

class AIAnswers(CamelModel):
    step1: Optional[str] = None
    step2: Optional[str] = None
    step3: Optional[str] = None
    step4: Optional[str] = None

class LaunchDetails(CamelModel):
    concept: Optional[str] = None
    target_pain: Optional[str] = None
    current_state: Optional[str] = None
    ideal_future: Optional[str] = None
    lp_url: Optional[str] = None
    price: Optional[str] = None
    launch_date: Optional[str] = None
    usp: Optional[str] = None
    belief: Optional[str] = None
    claim: Optional[str] = None
    generated_by: GeneratedBy = GeneratedBy.MANUAL
    ai_answers: Optional[AIAnswers] = None

class LaunchContentBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    target_audience: Optional[str] = None
    value_proposition: Optional[str] = None
    tone: Optional[str] = None
    core_message: Optional[str] = None
    launch_content: LaunchDetails = Field(default_factory=LaunchDetails)

class LaunchContentCreate(LaunchContentBase):
    pass

class LaunchContentUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    target_audience: Optional[str] = None
    value_proposition: Optional[str] = None
    tone: Optional[str] = None
    core_message: Optional[str] = None
    launch_content: Optional[LaunchDetails] = None

class LaunchContent(LaunchContentBase):
    id: str
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    synced: bool = True

class LaunchContext(CamelModel):
    """Flattened launch content as sent along with AI requests"""
    name: Optional[str] = None
    description: Optional[str] = None
    target_audience: Optional[str] = None
    value_proposition: Optional[str] = None
    tone: Optional[str] = None
    concept: Optional[str] = None
    target_pain: Optional[str] = None
    current_state: Optional[str] = None
    ideal_future: Optional[str] = None
    lp_url: Optional[str] = None
    price: Optional[str] = None

# AI wizard (4 questions -> launch content definition)

class WizardQuestion(CamelModel):
    question: str
    options: List[str] = Field(default_factory=list)

class AnalyzeRequest(CamelModel):
    text: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)

class QuestionContext(CamelModel):
    long_text: str
    answers: List[str] = Field(default_factory=list)

class QuestionRequest(CamelModel):
    step: int
    context: QuestionContext

class GenerateDefinitionRequest(CamelModel):
    name: str = Field(..., min_length=1)
    long_text: str = Field(..., min_length=1)
    answers: List[str] = Field(..., min_length=4, max_length=4)

class WizardQuestionResponse(CamelModel):
    question: WizardQuestion

class GeneratedDefinitionResponse(CamelModel):
    content: LaunchContentCreate
