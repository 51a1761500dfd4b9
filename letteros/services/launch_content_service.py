# letteros/services/launch_content_service.py
import asyncio
import uuid
import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from letteros.config import settings
from letteros.database.connection import get_db_connection, release_db_connection
from letteros.database.launch_content_repository import LaunchContentRepository
from letteros.models.launch_content import (
    LaunchContent, LaunchContentCreate, LaunchContentUpdate
)
from letteros.services.outbox import LaunchContentOutbox

logger = logging.getLogger(__name__)

def _to_row(record: LaunchContent) -> Dict[str, Any]:
    row = record.model_dump(exclude={"synced"})
    row["launch_content"] = record.launch_content.model_dump(mode="json")
    return row

def _from_row(row: Dict[str, Any], synced: bool = True) -> LaunchContent:
    return LaunchContent.model_validate({**row, "synced": synced})

class LaunchContentService:
    """Launch content storage with a local-first write path.

    Writes go to the local outbox, then to Postgres under a short timeout.
    A slow or failing remote write leaves the record pending in the outbox
    for the reconciler; the caller still gets the record back.
    """

    def __init__(self, outbox: Optional[LaunchContentOutbox] = None, remote_timeout: Optional[float] = None):
        self.outbox = outbox or LaunchContentOutbox(settings.outbox_path)
        self.remote_timeout = remote_timeout or settings.remote_write_timeout_seconds

    async def _write_remote(self, record: LaunchContent):
        connection = None
        try:
            connection = await get_db_connection()
            await LaunchContentRepository(connection).upsert(_to_row(record))
        finally:
            if connection:
                await release_db_connection(connection)

    async def _delete_remote(self, content_id: str) -> bool:
        connection = None
        try:
            connection = await get_db_connection()
            return await LaunchContentRepository(connection).delete(content_id)
        finally:
            if connection:
                await release_db_connection(connection)

    async def _push(self, record: LaunchContent, queued_at: str):
        """Write one outbox version to Postgres and clear it if it is still current"""
        await self._write_remote(record)
        if self.outbox.is_deleted(record.id):
            # Deleted while the write was in flight
            logger.info(f"Launch content {record.id} was deleted during a remote write, removing it again")
            await self._delete_remote(record.id)
            return
        if not self.outbox.remove(record.id, queued_at):
            logger.debug(f"Launch content {record.id} changed during a remote write, newer version stays queued")

    async def _save(self, record: LaunchContent) -> LaunchContent:
        queued_at = self.outbox.put(record.model_dump(mode="json", exclude={"synced"}))
        try:
            await asyncio.wait_for(self._push(record, queued_at), timeout=self.remote_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Remote write for launch content {record.id} timed out, kept in outbox")
            return record.model_copy(update={"synced": False})
        except Exception as e:
            logger.warning(f"Remote write for launch content {record.id} failed, kept in outbox: {e}")
            self.outbox.mark_failed(record.id, str(e))
            return record.model_copy(update={"synced": False})

        return record.model_copy(update={"synced": True})

    async def create(self, user_id: str, data: LaunchContentCreate) -> LaunchContent:
        now = datetime.now(timezone.utc)
        record = LaunchContent(
            id=str(uuid.uuid4()),
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **data.model_dump()
        )
        logger.info(f"Creating launch content {record.id} for user {user_id}")
        return await self._save(record)

    async def update(self, existing: LaunchContent, data: LaunchContentUpdate) -> LaunchContent:
        changes = data.model_dump(exclude_unset=True)
        merged = existing.model_dump()
        merged.update(changes)
        merged["updated_at"] = datetime.now(timezone.utc)
        record = LaunchContent.model_validate(merged)
        return await self._save(record)

    async def get(self, content_id: str) -> Optional[LaunchContent]:
        pending = self.outbox.get(content_id)
        if pending:
            return _from_row(pending, synced=False)

        connection = None
        try:
            connection = await get_db_connection()
            row = await LaunchContentRepository(connection).get(content_id)
            return _from_row(row) if row else None
        finally:
            if connection:
                await release_db_connection(connection)

    async def list_for_user(self, user_id: str) -> List[LaunchContent]:
        """Remote rows merged with this user's pending local writes, newest first"""
        pending = {item["id"]: _from_row(item, synced=False) for item in self.outbox.pending(user_id)}

        connection = None
        remote: List[LaunchContent] = []
        try:
            connection = await get_db_connection()
            rows = await LaunchContentRepository(connection).list_for_user(user_id)
            remote = [_from_row(row) for row in rows if row["id"] not in pending]
        except Exception as e:
            logger.error(f"Failed to list remote launch content for {user_id}: {e}")
        finally:
            if connection:
                await release_db_connection(connection)

        items = list(pending.values()) + remote
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        items.sort(key=lambda item: item.created_at or epoch, reverse=True)
        return items

    async def delete(self, content_id: str) -> bool:
        self.outbox.mark_deleted(content_id)
        return await self._delete_remote(content_id)

    async def flush(self, content_id: str) -> bool:
        """Push a pending record to Postgres now; raises when the remote write fails.

        Returns False when nothing was pending for content_id.
        """
        entry = self.outbox.entry(content_id)
        if not entry:
            return False
        payload, queued_at = entry
        try:
            await self._push(_from_row(payload, synced=False), queued_at)
        except Exception as e:
            logger.warning(f"Flushing launch content {content_id} failed: {e}")
            self.outbox.mark_failed(content_id, str(e))
            raise
        return True

    async def count_for_user(self, user_id: str) -> int:
        pending_ids = {item["id"] for item in self.outbox.pending(user_id)}
        connection = None
        try:
            connection = await get_db_connection()
            rows = await LaunchContentRepository(connection).list_for_user(user_id)
        finally:
            if connection:
                await release_db_connection(connection)
        return len(pending_ids | {row["id"] for row in rows})

    async def reconcile(self) -> int:
        """Push pending outbox entries to Postgres; returns how many were synced"""
        synced = 0
        for item, queued_at in self.outbox.entries():
            record = _from_row(item, synced=False)
            try:
                await self._push(record, queued_at)
            except Exception as e:
                logger.warning(f"Outbox reconcile failed for {record.id}: {e}")
                self.outbox.mark_failed(record.id, str(e))
                continue
            synced += 1

        if synced:
            logger.info(f"Outbox reconcile pushed {synced} launch content record(s)")
        return synced

async def run_outbox_reconciler(service: "LaunchContentService", interval: float):
    """Background loop started from the application lifespan"""
    while True:
        await asyncio.sleep(interval)
        try:
            await service.reconcile()
        except Exception as e:
            logger.error(f"Outbox reconciler iteration failed: {e}")

# Global service instance
launch_content_service = LaunchContentService()
