# letteros/routes/newsletters.py
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from letteros.auth.dependencies import get_current_user
from letteros.auth.models import SessionUser
from letteros.ai.editor import generate_subject_options
from letteros.ai.errors import AIServiceError
from letteros.ai.gemini import get_llm
from letteros.models.newsletter import (
    Newsletter, NewsletterCreate, NewsletterUpdate,
    SendRequest, SendResult, SubjectRequest, SubjectResponse
)
from letteros.routes.launch_content import require_launch_content
from letteros.services.newsletter_service import newsletter_service, NoRecipientsError
from letteros.utils.validation import ensure_owned
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/newsletters", tags=["Newsletters"])

MIN_SUBJECT_SOURCE_LENGTH = 50

@router.post("/generate-subjects", response_model=SubjectResponse)
async def generate_subjects(
    body: SubjectRequest,
    user: SessionUser = Depends(get_current_user),
    llm=Depends(get_llm)
):
    """Three subject lines, each with a different approach"""
    if len(body.content.strip()) < MIN_SUBJECT_SOURCE_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Content is too short (at least {MIN_SUBJECT_SOURCE_LENGTH} characters required)"
        )
    try:
        subjects = await generate_subject_options(body.content, body.product_context, llm)
        return SubjectResponse(subjects=subjects)
    except AIServiceError as e:
        logger.error(f"Subject generation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate subjects"
        )

@router.get("", response_model=List[Newsletter])
async def list_newsletters(user: SessionUser = Depends(get_current_user)):
    return await newsletter_service.list_for_user(user.id)

@router.post("", response_model=Newsletter, status_code=status.HTTP_201_CREATED)
async def create_newsletter(
    body: NewsletterCreate,
    user: SessionUser = Depends(get_current_user)
):
    if body.launch_content_id:
        await require_launch_content(body.launch_content_id, user.id)
    return await newsletter_service.create(user.id, body)

@router.get("/{newsletter_id}", response_model=Newsletter)
async def get_newsletter(
    newsletter_id: str,
    user: SessionUser = Depends(get_current_user)
):
    return ensure_owned(await newsletter_service.get(newsletter_id), user.id, "Newsletter")

@router.put("/{newsletter_id}", response_model=Newsletter)
async def update_newsletter(
    newsletter_id: str,
    body: NewsletterUpdate,
    user: SessionUser = Depends(get_current_user)
):
    ensure_owned(await newsletter_service.get(newsletter_id), user.id, "Newsletter")
    if body.launch_content_id:
        await require_launch_content(body.launch_content_id, user.id)
    return await newsletter_service.update(newsletter_id, body)

@router.delete("/{newsletter_id}")
async def delete_newsletter(
    newsletter_id: str,
    user: SessionUser = Depends(get_current_user)
):
    ensure_owned(await newsletter_service.get(newsletter_id), user.id, "Newsletter")
    await newsletter_service.delete(newsletter_id)
    return {"success": True}

@router.post("/{newsletter_id}/send", response_model=SendResult)
async def send_newsletter(
    newsletter_id: str,
    body: SendRequest,
    user: SessionUser = Depends(get_current_user)
):
    newsletter = ensure_owned(await newsletter_service.get(newsletter_id), user.id, "Newsletter")
    try:
        return await newsletter_service.send(newsletter, user.id, body)
    except NoRecipientsError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
