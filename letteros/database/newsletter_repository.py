# letteros/database/newsletter_repository.py
import asyncpg
from datetime import datetime
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)

SELECT_NEWSLETTER = """
    SELECT n.id, n.user_id, n.title, n.content, n.status, n.launch_content_id,
           lc.name AS launch_content_name, n.scheduled_at, n.sent_at,
           n.hypothesis, n.created_at, n.updated_at
    FROM newsletters n
    LEFT JOIN launch_contents lc ON n.launch_content_id = lc.id
"""

UPDATABLE_FIELDS = ("title", "content", "launch_content_id", "status", "scheduled_at")

class NewsletterRepository:
    def __init__(self, connection: asyncpg.Connection):
        self.conn = connection

    async def create(
        self,
        newsletter_id: str,
        user_id: str,
        title: str,
        content: str,
        status: str,
        launch_content_id: Optional[str] = None,
        scheduled_at: Optional[datetime] = None,
        hypothesis: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        try:
            await self.conn.execute("""
                INSERT INTO newsletters (
                    id, user_id, title, content, status, launch_content_id,
                    scheduled_at, hypothesis
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            """, newsletter_id, user_id, title, content, status,
                launch_content_id, scheduled_at, hypothesis)

            logger.info(f"Created newsletter {newsletter_id} for user {user_id}")
            return await self.get(newsletter_id)

        except Exception as e:
            logger.error(f"Failed to create newsletter for user {user_id}: {e}")
            raise

    async def get(self, newsletter_id: str) -> Optional[Dict[str, Any]]:
        result = await self.conn.fetchrow(SELECT_NEWSLETTER + " WHERE n.id = $1", newsletter_id)
        return dict(result) if result else None

    async def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        rows = await self.conn.fetch(
            SELECT_NEWSLETTER + " WHERE n.user_id = $1 ORDER BY n.created_at DESC",
            user_id
        )
        return [dict(row) for row in rows]

    async def update(self, newsletter_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        assignments = []
        params: List[Any] = []
        for name in UPDATABLE_FIELDS:
            if name in fields:
                params.append(fields[name])
                assignments.append(f"{name} = ${len(params)}")

        if assignments:
            params.append(newsletter_id)
            await self.conn.execute(f"""
                UPDATE newsletters
                SET {', '.join(assignments)}, updated_at = CURRENT_TIMESTAMP
                WHERE id = ${len(params)}
            """, *params)

        return await self.get(newsletter_id)

    async def mark_status(self, newsletter_id: str, status: str, sent_at: Optional[datetime] = None):
        await self.conn.execute("""
            UPDATE newsletters
            SET status = $1, sent_at = COALESCE($2, sent_at), updated_at = CURRENT_TIMESTAMP
            WHERE id = $3
        """, status, sent_at, newsletter_id)

    async def delete(self, newsletter_id: str) -> bool:
        result = await self.conn.execute("DELETE FROM newsletters WHERE id = $1", newsletter_id)
        return result.endswith(" 1")

    async def count_for_user(self, user_id: str, status: Optional[str] = None) -> int:
        if status:
            return await self.conn.fetchval(
                "SELECT COUNT(*) FROM newsletters WHERE user_id = $1 AND status = $2",
                user_id, status
            )
        return await self.conn.fetchval(
            "SELECT COUNT(*) FROM newsletters WHERE user_id = $1", user_id
        )

    async def record_sends(self, newsletter_id: str, subject: str, deliveries: List[Dict[str, Any]]):
        """Store one email_sends row per delivery attempt"""
        if not deliveries:
            return
        await self.conn.executemany("""
            INSERT INTO email_sends (
                id, newsletter_id, subscriber_id, recipient, subject,
                status, external_id, error, sent_at
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
        """, [
            (
                d["id"], newsletter_id, d.get("subscriber_id"), d["recipient"], subject,
                d["status"], d.get("external_id"), d.get("error"), d.get("sent_at")
            )
            for d in deliveries
        ])
