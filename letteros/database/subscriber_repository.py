# letteros/database/subscriber_repository.py
import asyncpg
import uuid
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)

COLUMNS = "id, user_id, email, name, tags, created_at"

class SubscriberRepository:
    def __init__(self, connection: asyncpg.Connection):
        self.conn = connection

    async def list_for_user(
        self,
        user_id: str,
        search: Optional[str] = None,
        tag: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = f"SELECT {COLUMNS} FROM subscribers WHERE user_id = $1"
        params: List[Any] = [user_id]

        if search:
            params.append(f"%{search.lower()}%")
            query += f" AND (LOWER(email) LIKE ${len(params)} OR LOWER(COALESCE(name, '')) LIKE ${len(params)})"
        if tag:
            params.append(tag)
            query += f" AND ${len(params)} = ANY(tags)"

        query += " ORDER BY created_at DESC"
        rows = await self.conn.fetch(query, *params)
        return [dict(row) for row in rows]

    async def list_emails(self, user_id: str) -> List[str]:
        rows = await self.conn.fetch(
            "SELECT LOWER(email) AS email FROM subscribers WHERE user_id = $1", user_id
        )
        return [row["email"] for row in rows]

    async def list_tags(self, user_id: str) -> List[str]:
        rows = await self.conn.fetch("""
            SELECT DISTINCT UNNEST(tags) AS tag
            FROM subscribers
            WHERE user_id = $1
            ORDER BY tag
        """, user_id)
        return [row["tag"] for row in rows]

    async def get(self, subscriber_id: str) -> Optional[Dict[str, Any]]:
        result = await self.conn.fetchrow(
            f"SELECT {COLUMNS} FROM subscribers WHERE id = $1", subscriber_id
        )
        return dict(result) if result else None

    async def get_by_email(self, user_id: str, email: str) -> Optional[Dict[str, Any]]:
        result = await self.conn.fetchrow(f"""
            SELECT {COLUMNS} FROM subscribers
            WHERE user_id = $1 AND LOWER(email) = LOWER($2)
        """, user_id, email)
        return dict(result) if result else None

    async def create(
        self,
        user_id: str,
        email: str,
        name: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        try:
            result = await self.conn.fetchrow(f"""
                INSERT INTO subscribers (id, user_id, email, name, tags)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {COLUMNS}
            """, str(uuid.uuid4()), user_id, email.lower(), name, tags or [])
            return dict(result)
        except Exception as e:
            logger.error(f"Failed to create subscriber {email}: {e}")
            raise

    async def insert_batch(self, user_id: str, candidates: List[Dict[str, Any]]):
        """Insert one import batch in a single transaction"""
        async with self.conn.transaction():
            await self.conn.executemany("""
                INSERT INTO subscribers (id, user_id, email, name, tags)
                VALUES ($1, $2, $3, $4, $5)
            """, [
                (str(uuid.uuid4()), user_id, c["email"].lower(), c.get("name"), c.get("tags") or [])
                for c in candidates
            ])

    async def delete(self, subscriber_id: str) -> bool:
        result = await self.conn.execute("DELETE FROM subscribers WHERE id = $1", subscriber_id)
        return result.endswith(" 1")

    async def count_for_user(self, user_id: str) -> int:
        return await self.conn.fetchval(
            "SELECT COUNT(*) FROM subscribers WHERE user_id = $1", user_id
        )
