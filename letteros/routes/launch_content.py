# letteros/routes/launch_content.py
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from letteros.auth.dependencies import get_current_user
from letteros.auth.models import SessionUser
from letteros.ai import launch_wizard
from letteros.ai.errors import AIServiceError
from letteros.ai.gemini import get_llm
from letteros.models.launch_content import (
    AnalyzeRequest, GenerateDefinitionRequest, GeneratedDefinitionResponse,
    LaunchContent, LaunchContentCreate, LaunchContentUpdate,
    QuestionRequest, WizardQuestionResponse
)
from letteros.services.launch_content_service import launch_content_service
from letteros.utils.validation import ensure_owned
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/launch-content", tags=["Launch Content"])

async def require_launch_content(content_id: str, user_id: str) -> LaunchContent:
    """Owned launch content that is safe to reference from a newsletter row.

    A record still waiting in the outbox is pushed to Postgres first, since
    newsletters.launch_content_id is a foreign key.
    """
    record = ensure_owned(await launch_content_service.get(content_id), user_id, "Launch content")
    if record.synced:
        return record
    try:
        await launch_content_service.flush(content_id)
    except Exception as e:
        logger.error(f"Launch content {content_id} could not be saved before use: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Launch content is not saved yet, please retry"
        )
    return record.model_copy(update={"synced": True})

# Wizard endpoints come first so "/analyze" etc. never match "/{content_id}"

@router.post("/analyze", response_model=WizardQuestionResponse)
async def analyze_description(
    body: AnalyzeRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    """First wizard question, derived from the business description"""
    try:
        question = await launch_wizard.analyze_description(body.text, body.name, llm)
        return WizardQuestionResponse(question=question)
    except AIServiceError as e:
        logger.error(f"Launch content analysis failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to analyze content"
        )

@router.post("/question", response_model=WizardQuestionResponse)
async def next_wizard_question(
    body: QuestionRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        question = await launch_wizard.next_question(body.step, body.context, llm)
        return WizardQuestionResponse(question=question)
    except launch_wizard.InvalidWizardStepError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except AIServiceError as e:
        logger.error(f"Wizard question generation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate question"
        )

@router.post("/generate", response_model=GeneratedDefinitionResponse)
async def generate_definition(
    body: GenerateDefinitionRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    try:
        content = await launch_wizard.generate_definition(body.name, body.long_text, body.answers, llm)
        return GeneratedDefinitionResponse(content=content)
    except AIServiceError as e:
        logger.error(f"Launch content generation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate content"
        )

@router.get("", response_model=List[LaunchContent])
async def list_launch_content(user: SessionUser = Depends(get_current_user)):
    return await launch_content_service.list_for_user(user.id)

@router.post("", response_model=LaunchContent, status_code=status.HTTP_201_CREATED)
async def create_launch_content(
    body: LaunchContentCreate,
    user: SessionUser = Depends(get_current_user)
):
    return await launch_content_service.create(user.id, body)

@router.get("/{content_id}", response_model=LaunchContent)
async def get_launch_content(
    content_id: str,
    user: SessionUser = Depends(get_current_user)
):
    record = await launch_content_service.get(content_id)
    return ensure_owned(record, user.id, "Launch content")

@router.put("/{content_id}", response_model=LaunchContent)
async def update_launch_content(
    content_id: str,
    body: LaunchContentUpdate,
    user: SessionUser = Depends(get_current_user)
):
    existing = ensure_owned(await launch_content_service.get(content_id), user.id, "Launch content")
    return await launch_content_service.update(existing, body)

@router.delete("/{content_id}")
async def delete_launch_content(
    content_id: str,
    user: SessionUser = Depends(get_current_user)
):
    ensure_owned(await launch_content_service.get(content_id), user.id, "Launch content")
    await launch_content_service.delete(content_id)
    return {"success": True}
