# letteros/ai/editor.py
"""Editor assists: subject ideas, rewrites, drafts and free chat"""
import logging
from typing import List, Optional

from pydantic import ValidationError
from letteros.ai.errors import AIResponseParseError
from letteros.ai.parsing import require_json_object
from letteros.ai.plan_editing import parse_alternatives
from letteros.ai.planning_chat import format_transcript
from letteros.ai.prompts import render_prompt
from letteros.ai.prompts.loader import NOT_SET
from letteros.models.editor import (
    AssistEditRequest, AssistEditResponse, DraftResponse, ImproveResponse
)
from letteros.models.newsletter import SubjectOption
from letteros.models.planning import ChatMessage

logger = logging.getLogger(__name__)

SUBJECT_CONTENT_LIMIT = 2000
BODY_EXCERPT_SUBJECT = 500
BODY_EXCERPT_EDIT = 1000

def _system() -> str:
    return render_prompt("editor_system")

async def generate_titles(content: str, llm) -> List[str]:
    raw = await llm.generate(render_prompt("titles", system=_system(), content=content))
    titles = require_json_object(raw).get("titles")
    if not isinstance(titles, list):
        raise AIResponseParseError("AI response has no titles list")
    return [str(title) for title in titles if title]

async def improve_content(content: str, feedback: Optional[str], llm) -> ImproveResponse:
    raw = await llm.generate(render_prompt(
        "improve",
        system=_system(),
        content=content,
        feedback=feedback or "None"
    ))
    try:
        return ImproveResponse.model_validate(require_json_object(raw))
    except ValidationError as e:
        raise AIResponseParseError(f"Unexpected improvement payload: {e}")

async def generate_draft(topic: str, context: Optional[str], llm) -> DraftResponse:
    raw = await llm.generate(render_prompt(
        "draft",
        system=_system(),
        topic=topic,
        context=context or "None"
    ))
    try:
        return DraftResponse.model_validate(require_json_object(raw))
    except ValidationError as e:
        raise AIResponseParseError(f"Unexpected draft payload: {e}")

async def chat_with_editor(message: str, history: List[ChatMessage], llm) -> str:
    raw = await llm.generate(render_prompt(
        "editor_chat",
        system=_system(),
        transcript=format_transcript(history),
        message=message
    ))
    return raw.strip()

async def generate_subject_options(content: str, product_context: Optional[str], llm) -> List[SubjectOption]:
    context_block = ""
    if product_context:
        context_block = f"\n[Sender context]\n{product_context}\n"
    raw = await llm.generate(render_prompt(
        "subject_options",
        product_context=context_block,
        content=content[:SUBJECT_CONTENT_LIMIT]
    ))
    subjects = require_json_object(raw).get("subjects")
    if not isinstance(subjects, list):
        raise AIResponseParseError("AI response has no subjects list")
    try:
        return [SubjectOption.model_validate(item) for item in subjects]
    except ValidationError as e:
        raise AIResponseParseError(f"Unexpected subject payload: {e}")

async def assist_edit(request: AssistEditRequest, llm) -> AssistEditResponse:
    body = request.current_body

    if request.type == "subject_alternatives":
        raw = await llm.generate(render_prompt(
            "assist_subject_alternatives",
            subject=request.current_subject,
            body_excerpt=body[:BODY_EXCERPT_SUBJECT],
            name=request.launch_content.name or "",
            target_audience=request.launch_content.target_audience or NOT_SET
        ))
        alternatives = parse_alternatives(require_json_object(raw).get("alternatives"))
        return AssistEditResponse(success=True, alternatives=alternatives)

    if request.type == "body_modify":
        raw = await llm.generate(render_prompt(
            "assist_body_modify",
            selected_text=request.selected_text,
            body_excerpt=body[:BODY_EXCERPT_EDIT],
            instruction=request.instruction
        ))
        return AssistEditResponse(success=True, modified_text=raw.strip())

    raw = await llm.generate(render_prompt(
        "assist_body_alternatives",
        selected_text=request.selected_text,
        body_excerpt=body[:BODY_EXCERPT_EDIT]
    ))
    alternatives = parse_alternatives(require_json_object(raw).get("alternatives"))
    return AssistEditResponse(success=True, alternatives=alternatives)
