# letteros/models/newsletter.py
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List
from pydantic import EmailStr, Field
from letteros.models.base import CamelModel

class NewsletterStatus(str, Enum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    SENT = "SENT"
    FAILED = "FAILED"

class Hypothesis(CamelModel):
    """The plan and chosen variants a newsletter was assembled from"""
    plan: Optional[Dict[str, Any]] = None
    selected_variants: Optional[Dict[str, str]] = None

class NewsletterCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    launch_content_id: Optional[str] = None
    status: NewsletterStatus = NewsletterStatus.DRAFT
    scheduled_at: Optional[datetime] = None
    hypothesis: Optional[Hypothesis] = None

class NewsletterUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    launch_content_id: Optional[str] = None
    status: Optional[NewsletterStatus] = None
    scheduled_at: Optional[datetime] = None

class Newsletter(CamelModel):
    id: str
    user_id: str
    title: str
    content: str
    status: NewsletterStatus
    launch_content_id: Optional[str] = None
    launch_content_name: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    hypothesis: Optional[Hypothesis] = None

class SendRequest(CamelModel):
    to: Optional[EmailStr] = None
    send_to_subscribers: bool = False
    tag: Optional[str] = None

class SendResult(CamelModel):
    total: int
    successful: int
    failed: int
    status: Optional[NewsletterStatus] = None
    message_id: Optional[str] = None

class SubjectRequest(CamelModel):
    content: str
    product_context: Optional[str] = None

class SubjectOption(CamelModel):
    id: str
    text: str
    approach: str = ""
    reason: str = ""

class SubjectResponse(CamelModel):
    subjects: List[SubjectOption]

class DashboardStats(CamelModel):
    newsletter_count: int = 0
    launch_content_count: int = 0
    total_subscribers: int = 0
    sent_count: int = 0
