# letteros/database/launch_content_repository.py
import asyncpg
from typing import Optional, List, Dict, Any
import logging

logger = logging.getLogger(__name__)

COLUMNS = """
    id, user_id, name, description, target_audience, value_proposition,
    tone, core_message, launch_content, created_at, updated_at
"""

class LaunchContentRepository:
    def __init__(self, connection: asyncpg.Connection):
        self.conn = connection

    async def upsert(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Insert a launch content row, or overwrite an older row with the same id.

        Returns None when the stored row is newer than record, which is left as is.
        """
        try:
            query = f"""
                INSERT INTO launch_contents (
                    id, user_id, name, description, target_audience, value_proposition,
                    tone, core_message, launch_content, created_at, updated_at
                )
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                ON CONFLICT (id) DO UPDATE SET
                    name = EXCLUDED.name,
                    description = EXCLUDED.description,
                    target_audience = EXCLUDED.target_audience,
                    value_proposition = EXCLUDED.value_proposition,
                    tone = EXCLUDED.tone,
                    core_message = EXCLUDED.core_message,
                    launch_content = EXCLUDED.launch_content,
                    updated_at = EXCLUDED.updated_at
                WHERE launch_contents.updated_at <= EXCLUDED.updated_at
                RETURNING {COLUMNS}
            """
            result = await self.conn.fetchrow(
                query,
                record["id"], record["user_id"], record["name"], record.get("description", ""),
                record.get("target_audience"), record.get("value_proposition"),
                record.get("tone"), record.get("core_message"),
                record.get("launch_content") or {},
                record["created_at"], record["updated_at"]
            )
            return dict(result) if result else None

        except Exception as e:
            logger.error(f"Failed to upsert launch content {record.get('id')}: {e}")
            raise

    async def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        rows = await self.conn.fetch(f"""
            SELECT {COLUMNS}
            FROM launch_contents
            WHERE user_id = $1
            ORDER BY created_at DESC
        """, user_id)
        return [dict(row) for row in rows]

    async def get(self, content_id: str) -> Optional[Dict[str, Any]]:
        result = await self.conn.fetchrow(f"""
            SELECT {COLUMNS}
            FROM launch_contents
            WHERE id = $1
        """, content_id)
        return dict(result) if result else None

    async def delete(self, content_id: str) -> bool:
        result = await self.conn.execute("DELETE FROM launch_contents WHERE id = $1", content_id)
        return result.endswith(" 1")
