# letteros/database/user_repository.py
import asyncpg
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

class UserRepository:
    def __init__(self, connection: asyncpg.Connection):
        self.conn = connection

    async def upsert_user(
        self,
        user_id: str,
        email: str,
        display_name: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create the user on first sign-in, refresh email/name afterwards"""
        try:
            query = """
                INSERT INTO users (id, email, display_name)
                VALUES ($1, $2, $3)
                ON CONFLICT (id) DO UPDATE SET
                    email = EXCLUDED.email,
                    display_name = COALESCE(EXCLUDED.display_name, users.display_name),
                    last_login_at = CURRENT_TIMESTAMP
                RETURNING id, email, display_name, created_at, last_login_at
            """

            result = await self.conn.fetchrow(query, user_id, email, display_name)
            logger.info(f"Synced user in database: {email} ({user_id})")
            return dict(result)

        except Exception as e:
            logger.error(f"Failed to upsert user {email}: {e}")
            raise
