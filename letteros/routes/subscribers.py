# letteros/routes/subscribers.py
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response
from typing import List, Optional
from letteros.auth.dependencies import get_current_user
from letteros.auth.models import SessionUser
from letteros.models.subscriber import (
    ImportPreview, ImportRequest, ImportResult, Subscriber, SubscriberCreate, TagList
)
from letteros.services.subscriber_service import subscriber_service, DuplicateSubscriberError
from letteros.subscribers.csv_export import export_subscribers_csv
from letteros.subscribers.csv_import import SubscriberCsvError
from letteros.utils.validation import ensure_owned, sanitize_search
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/subscribers", tags=["Subscribers"])

@router.get("", response_model=List[Subscriber])
async def list_subscribers(
    search: Optional[str] = Query(None, description="Email or name substring"),
    tag: Optional[str] = Query(None, description="Only subscribers carrying this tag"),
    user: SessionUser = Depends(get_current_user)
):
    return await subscriber_service.list_for_user(user.id, sanitize_search(search), tag)

@router.get("/tags", response_model=TagList)
async def list_tags(user: SessionUser = Depends(get_current_user)):
    return TagList(tags=await subscriber_service.list_tags(user.id))

@router.get("/export")
async def export_subscribers(user: SessionUser = Depends(get_current_user)):
    subscribers = await subscriber_service.list_for_user(user.id)
    return Response(
        content=export_subscribers_csv(subscribers),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="subscribers.csv"'}
    )

@router.post("/import/preview", response_model=ImportPreview)
async def preview_import(
    file: UploadFile = File(...),
    user: SessionUser = Depends(get_current_user)
):
    """Parse an uploaded CSV; nothing is written until /import is called"""
    raw = await file.read()
    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="The CSV file must be UTF-8 encoded"
        )

    try:
        return await subscriber_service.preview_import(user.id, text)
    except SubscriberCsvError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

@router.post("/import", response_model=ImportResult)
async def import_subscribers(
    body: ImportRequest,
    user: SessionUser = Depends(get_current_user)
):
    return await subscriber_service.import_candidates(user.id, body.subscribers)

@router.post("", response_model=Subscriber, status_code=status.HTTP_201_CREATED)
async def add_subscriber(
    body: SubscriberCreate,
    user: SessionUser = Depends(get_current_user)
):
    try:
        return await subscriber_service.add(user.id, body)
    except DuplicateSubscriberError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

@router.delete("/{subscriber_id}")
async def delete_subscriber(
    subscriber_id: str,
    user: SessionUser = Depends(get_current_user)
):
    ensure_owned(await subscriber_service.get(subscriber_id), user.id, "Subscriber")
    await subscriber_service.delete(subscriber_id)
    return {"success": True}
