# letteros/models/editor.py
from typing import Optional, List, Literal
from pydantic import Field
from letteros.models.base import CamelModel
from letteros.models.launch_content import LaunchContext
from letteros.models.planning import ChatMessage, Alternative

class TitlesRequest(CamelModel):
    content: str = Field(..., min_length=1)

class TitlesResponse(CamelModel):
    titles: List[str]

class ImproveRequest(CamelModel):
    content: str = Field(..., min_length=1)
    feedback: Optional[str] = None

class ImproveResponse(CamelModel):
    title: str
    content: str
    improvements: List[str] = Field(default_factory=list)

class DraftRequest(CamelModel):
    topic: str = Field(..., min_length=1)
    context: Optional[str] = None

class DraftResponse(CamelModel):
    title: str
    content: str

class EditorChatRequest(CamelModel):
    message: str = Field(..., min_length=1)
    history: List[ChatMessage] = Field(default_factory=list)

class EditorChatResponse(CamelModel):
    response: str

class AssistEditRequest(CamelModel):
    type: Literal["subject_alternatives", "body_modify", "body_alternatives"]
    current_subject: str = ""
    current_body: str = ""
    instruction: str = ""
    selected_text: str = ""
    launch_content: LaunchContext = Field(default_factory=LaunchContext)

class AssistEditResponse(CamelModel):
    success: bool = True
    alternatives: Optional[List[Alternative]] = None
    modified_text: Optional[str] = None
