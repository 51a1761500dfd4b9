# letteros/utils/validation.py
import re
from typing import Optional, Any
from fastapi import HTTPException, status

def sanitize_search(text: Optional[str]) -> Optional[str]:
    """Trim a free-text filter and drop control characters"""
    if not text:
        return None

    text = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', text.strip())

    # Limit length
    text = text[:100]

    return text if text else None

def ensure_owned(record: Optional[Any], user_id: str, label: str) -> Any:
    """404 for a missing record, 403 for someone else's"""
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found"
        )
    if record.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden"
        )
    return record
