# letteros/models/subscriber.py
from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import EmailStr, Field
from letteros.models.base import CamelModel

class SubscriberCandidate(CamelModel):
    email: str
    name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

class SubscriberCreate(CamelModel):
    email: EmailStr
    name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

class Subscriber(CamelModel):
    id: str
    user_id: str
    email: str
    name: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None

class ImportPreview(CamelModel):
    total: int
    preview: List[SubscriberCandidate]
    candidates: List[SubscriberCandidate]
    duplicates: int
    duplicates_in_file: int
    duplicates_existing: int

class ImportRequest(CamelModel):
    subscribers: List[SubscriberCandidate] = Field(..., min_length=1)

class ImportStatus(str, Enum):
    COMPLETED = "completed"
    ERROR = "error"

class ImportProgress(CamelModel):
    imported: int
    total: int

class ImportResult(CamelModel):
    status: ImportStatus
    imported: int
    total: int
    batches_committed: int
    progress: List[ImportProgress] = Field(default_factory=list)
    error: Optional[str] = None
    skipped_invalid: int = 0
    duplicates_in_file: int = 0
    duplicates_existing: int = 0

class TagList(CamelModel):
    tags: List[str]
