# letteros/services/subscriber_service.py
import logging
from typing import Optional, List

from letteros.database.connection import get_db_connection, release_db_connection
from letteros.database.subscriber_repository import SubscriberRepository
from letteros.models.subscriber import (
    ImportPreview, ImportResult, Subscriber, SubscriberCandidate, SubscriberCreate
)
from letteros.subscribers.csv_import import dedupe_candidates, parse_subscriber_csv
from letteros.subscribers.importer import commit_in_batches

logger = logging.getLogger(__name__)

class DuplicateSubscriberError(ValueError):
    pass

class SubscriberService:
    async def list_for_user(
        self,
        user_id: str,
        search: Optional[str] = None,
        tag: Optional[str] = None
    ) -> List[Subscriber]:
        connection = None
        try:
            connection = await get_db_connection()
            rows = await SubscriberRepository(connection).list_for_user(user_id, search, tag)
            return [Subscriber.model_validate(row) for row in rows]
        finally:
            if connection:
                await release_db_connection(connection)

    async def list_tags(self, user_id: str) -> List[str]:
        connection = None
        try:
            connection = await get_db_connection()
            return await SubscriberRepository(connection).list_tags(user_id)
        finally:
            if connection:
                await release_db_connection(connection)

    async def get(self, subscriber_id: str) -> Optional[Subscriber]:
        connection = None
        try:
            connection = await get_db_connection()
            row = await SubscriberRepository(connection).get(subscriber_id)
            return Subscriber.model_validate(row) if row else None
        finally:
            if connection:
                await release_db_connection(connection)

    async def add(self, user_id: str, data: SubscriberCreate) -> Subscriber:
        connection = None
        try:
            connection = await get_db_connection()
            repository = SubscriberRepository(connection)
            if await repository.get_by_email(user_id, data.email):
                raise DuplicateSubscriberError(f"Subscriber already exists: {data.email}")
            row = await repository.create(user_id, data.email, data.name, data.tags)
            return Subscriber.model_validate(row)
        finally:
            if connection:
                await release_db_connection(connection)

    async def delete(self, subscriber_id: str) -> bool:
        connection = None
        try:
            connection = await get_db_connection()
            return await SubscriberRepository(connection).delete(subscriber_id)
        finally:
            if connection:
                await release_db_connection(connection)

    async def preview_import(self, user_id: str, text: str) -> ImportPreview:
        """Parse an uploaded CSV against the user's current list; nothing is written"""
        connection = None
        try:
            connection = await get_db_connection()
            existing = await SubscriberRepository(connection).list_emails(user_id)
        finally:
            if connection:
                await release_db_connection(connection)
        return parse_subscriber_csv(text, existing_emails=existing)

    async def import_candidates(self, user_id: str, candidates: List[SubscriberCandidate]) -> ImportResult:
        """Commit previewed candidates after checking them again against the current list"""
        connection = None
        try:
            connection = await get_db_connection()
            existing = await SubscriberRepository(connection).list_emails(user_id)
        finally:
            if connection:
                await release_db_connection(connection)

        deduped = dedupe_candidates(candidates, existing)
        if len(deduped.kept) < len(candidates):
            logger.info(
                f"Subscriber import for {user_id} dropped {len(candidates) - len(deduped.kept)} "
                f"candidate(s): invalid={deduped.skipped_invalid} "
                f"dup_in_file={deduped.duplicates_in_file} dup_existing={deduped.duplicates_existing}"
            )

        async def write_batch(batch: List[SubscriberCandidate]):
            connection = None
            try:
                connection = await get_db_connection()
                await SubscriberRepository(connection).insert_batch(
                    user_id,
                    [candidate.model_dump() for candidate in batch]
                )
            finally:
                if connection:
                    await release_db_connection(connection)

        result = await commit_in_batches(deduped.kept, write_batch)
        result = result.model_copy(update={
            "skipped_invalid": deduped.skipped_invalid,
            "duplicates_in_file": deduped.duplicates_in_file,
            "duplicates_existing": deduped.duplicates_existing,
        })
        logger.info(
            f"Subscriber import for {user_id}: {result.status.value} "
            f"{result.imported}/{result.total}"
        )
        return result

# Global service instance
subscriber_service = SubscriberService()
