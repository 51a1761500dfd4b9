# letteros/routes/ai.py
from fastapi import APIRouter, Depends, HTTPException, status
from letteros.auth.dependencies import get_current_user
from letteros.auth.models import SessionUser
from letteros.ai import editor
from letteros.ai.count_suggestion import suggest_newsletter_count
from letteros.ai.errors import AIServiceError
from letteros.ai.gemini import get_llm
from letteros.ai.plan_editing import modify_plan
from letteros.ai.planning_chat import planning_chat
from letteros.ai.series import generate_series
from letteros.ai.variants import IncompleteSelectionError, assemble_final_content, generate_variants
from letteros.models.editor import (
    AssistEditRequest, AssistEditResponse, DraftRequest, DraftResponse,
    EditorChatRequest, EditorChatResponse, ImproveRequest, ImproveResponse,
    TitlesRequest, TitlesResponse
)
from letteros.models.newsletter import Hypothesis, NewsletterCreate, NewsletterStatus
from letteros.models.planning import (
    CountRequest, CountSuggestion, ModifyPlanRequest, ModifyPlanResponse,
    PlanningChatRequest, PlanningResult, SeriesRequest, SeriesResponse
)
from letteros.models.variants import AssembleRequest, AssembleResponse, VariantRequest, VariantSet, VariantSlot
from letteros.routes.launch_content import require_launch_content
from letteros.services.newsletter_service import newsletter_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/ai", tags=["AI"])

def _ai_failure(action: str, error: Exception) -> HTTPException:
    logger.error(f"AI {action} failed: {error}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}"
    )

@router.post("/newsletter-count", response_model=CountSuggestion)
async def newsletter_count(
    body: CountRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    """Recommended series length; falls back to a fixed suggestion"""
    return await suggest_newsletter_count(body.launch_content, llm)

@router.post("/planning-chat", response_model=PlanningResult)
async def planning_chat_turn(
    body: PlanningChatRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        return await planning_chat.next_turn(body, llm)
    except AIServiceError as e:
        raise _ai_failure("process planning chat", e)

@router.post("/modify-plan", response_model=ModifyPlanResponse, response_model_exclude_none=True)
async def modify_plan_field(
    body: ModifyPlanRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        return await modify_plan(body, llm)
    except AIServiceError as e:
        raise _ai_failure("modify plan", e)

@router.post("/newsletter-generate", response_model=VariantSet)
async def newsletter_generate(
    body: VariantRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    """Three candidates for each of subject, introduction, structure and conclusion"""
    try:
        return await generate_variants(body, llm)
    except AIServiceError as e:
        raise _ai_failure("generate newsletter", e)

@router.post("/newsletter-assemble", response_model=AssembleResponse)
async def newsletter_assemble(
    body: AssembleRequest,
    user: SessionUser = Depends(get_current_user)
):
    try:
        assembled = assemble_final_content(body.selections)
    except IncompleteSelectionError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if not body.save:
        return AssembleResponse(title=assembled.title, content=assembled.content)

    if body.launch_content_id:
        await require_launch_content(body.launch_content_id, user.id)

    hypothesis = Hypothesis(
        plan=body.plan.model_dump(by_alias=True) if body.plan else None,
        selected_variants={slot.value: body.selections.get(slot).id for slot in VariantSlot}
    )
    newsletter = await newsletter_service.create(user.id, NewsletterCreate(
        title=assembled.title[:200],
        content=assembled.content,
        launch_content_id=body.launch_content_id,
        status=NewsletterStatus.DRAFT,
        hypothesis=hypothesis
    ))
    return AssembleResponse(
        title=newsletter.title,
        content=newsletter.content,
        newsletter_id=newsletter.id,
        saved=True
    )

@router.post("/newsletter-full-generate", response_model=SeriesResponse)
async def newsletter_full_generate(
    body: SeriesRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        return await generate_series(body, llm)
    except AIServiceError as e:
        raise _ai_failure("generate newsletters", e)

@router.post("/titles", response_model=TitlesResponse)
async def titles(
    body: TitlesRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        return TitlesResponse(titles=await editor.generate_titles(body.content, llm))
    except AIServiceError as e:
        raise _ai_failure("generate titles", e)

@router.post("/improve", response_model=ImproveResponse)
async def improve(
    body: ImproveRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        return await editor.improve_content(body.content, body.feedback, llm)
    except AIServiceError as e:
        raise _ai_failure("improve content", e)

@router.post("/generate", response_model=DraftResponse)
async def generate(
    body: DraftRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        return await editor.generate_draft(body.topic, body.context, llm)
    except AIServiceError as e:
        raise _ai_failure("generate content", e)

@router.post("/chat", response_model=EditorChatResponse)
async def chat(
    body: EditorChatRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        reply = await editor.chat_with_editor(body.message, body.history, llm)
        return EditorChatResponse(response=reply)
    except AIServiceError as e:
        raise _ai_failure("process chat", e)

@router.post("/assist-edit", response_model=AssistEditResponse, response_model_exclude_none=True)
async def assist_edit(
    body: AssistEditRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        return await editor.assist_edit(body, llm)
    except AIServiceError as e:
        raise _ai_failure("assist edit", e)
