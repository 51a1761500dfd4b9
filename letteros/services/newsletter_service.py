# letteros/services/newsletter_service.py
import asyncio
import uuid
import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from letteros.config import settings
from letteros.database.connection import get_db_connection, release_db_connection
from letteros.database.newsletter_repository import NewsletterRepository
from letteros.database.subscriber_repository import SubscriberRepository
from letteros.models.newsletter import (
    Newsletter, NewsletterCreate, NewsletterStatus, NewsletterUpdate,
    SendRequest, SendResult, DashboardStats
)
from letteros.services.email_service import email_service

logger = logging.getLogger(__name__)

class NoRecipientsError(ValueError):
    """A send request that resolves to nobody"""

class NewsletterService:
    """Newsletter storage and delivery"""

    async def list_for_user(self, user_id: str) -> List[Newsletter]:
        connection = None
        try:
            connection = await get_db_connection()
            rows = await NewsletterRepository(connection).list_for_user(user_id)
            return [Newsletter.model_validate(row) for row in rows]
        finally:
            if connection:
                await release_db_connection(connection)

    async def get(self, newsletter_id: str) -> Optional[Newsletter]:
        connection = None
        try:
            connection = await get_db_connection()
            row = await NewsletterRepository(connection).get(newsletter_id)
            return Newsletter.model_validate(row) if row else None
        finally:
            if connection:
                await release_db_connection(connection)

    async def create(self, user_id: str, data: NewsletterCreate) -> Newsletter:
        connection = None
        try:
            connection = await get_db_connection()
            row = await NewsletterRepository(connection).create(
                newsletter_id=str(uuid.uuid4()),
                user_id=user_id,
                title=data.title,
                content=data.content,
                status=data.status.value,
                launch_content_id=data.launch_content_id,
                scheduled_at=data.scheduled_at,
                hypothesis=data.hypothesis.model_dump(mode="json") if data.hypothesis else None
            )
            return Newsletter.model_validate(row)
        finally:
            if connection:
                await release_db_connection(connection)

    async def update(self, newsletter_id: str, data: NewsletterUpdate) -> Optional[Newsletter]:
        fields = data.model_dump(exclude_unset=True)
        if "status" in fields and fields["status"] is not None:
            fields["status"] = fields["status"].value

        connection = None
        try:
            connection = await get_db_connection()
            row = await NewsletterRepository(connection).update(newsletter_id, fields)
            return Newsletter.model_validate(row) if row else None
        finally:
            if connection:
                await release_db_connection(connection)

    async def delete(self, newsletter_id: str) -> bool:
        connection = None
        try:
            connection = await get_db_connection()
            return await NewsletterRepository(connection).delete(newsletter_id)
        finally:
            if connection:
                await release_db_connection(connection)

    async def _resolve_recipients(self, user_id: str, request: SendRequest) -> List[Dict[str, Any]]:
        if request.send_to_subscribers:
            connection = None
            try:
                connection = await get_db_connection()
                rows = await SubscriberRepository(connection).list_for_user(user_id, tag=request.tag)
            finally:
                if connection:
                    await release_db_connection(connection)
            recipients = [{"email": row["email"], "subscriber_id": row["id"]} for row in rows]
            if not recipients:
                raise NoRecipientsError("No subscribers to send to")
            return recipients

        if request.to:
            return [{"email": str(request.to), "subscriber_id": None}]

        raise NoRecipientsError('Either "to" or "sendToSubscribers" must be specified')

    async def _deliver(self, newsletter: Newsletter, recipient: Dict[str, Any]) -> Dict[str, Any]:
        unsubscribe_url = None
        if recipient["subscriber_id"]:
            unsubscribe_url = f"{settings.frontend_url}/unsubscribe/{recipient['subscriber_id']}"

        delivery = {
            "id": str(uuid.uuid4()),
            "subscriber_id": recipient["subscriber_id"],
            "recipient": recipient["email"],
        }
        try:
            result = await email_service.send_newsletter_email(
                to_email=recipient["email"],
                title=newsletter.title,
                content=newsletter.content,
                product_name=newsletter.launch_content_name,
                unsubscribe_url=unsubscribe_url
            )
            delivery.update(
                status="SENT",
                external_id=result.get("message_id"),
                sent_at=datetime.now(timezone.utc)
            )
        except ValueError as e:
            delivery.update(status="FAILED", error=str(e))
        return delivery

    async def send(self, newsletter: Newsletter, user_id: str, request: SendRequest) -> SendResult:
        """Deliver in batches with a pause between them; every attempt is recorded"""
        recipients = await self._resolve_recipients(user_id, request)
        batch_size = settings.send_batch_size
        deliveries: List[Dict[str, Any]] = []

        for start in range(0, len(recipients), batch_size):
            batch = recipients[start:start + batch_size]
            deliveries.extend(await asyncio.gather(
                *(self._deliver(newsletter, recipient) for recipient in batch)
            ))
            if start + batch_size < len(recipients):
                await asyncio.sleep(settings.send_batch_pause_seconds)

        successful = sum(1 for d in deliveries if d["status"] == "SENT")
        failed = len(deliveries) - successful
        logger.info(f"Newsletter {newsletter.id} delivered: {successful} sent, {failed} failed")

        status = None
        connection = None
        try:
            connection = await get_db_connection()
            repository = NewsletterRepository(connection)
            await repository.record_sends(newsletter.id, newsletter.title, deliveries)
            if request.send_to_subscribers:
                status = NewsletterStatus.SENT if successful else NewsletterStatus.FAILED
                await repository.mark_status(
                    newsletter.id,
                    status.value,
                    sent_at=datetime.now(timezone.utc) if successful else None
                )
        finally:
            if connection:
                await release_db_connection(connection)

        message_id = deliveries[0].get("external_id") if len(deliveries) == 1 else None
        return SendResult(
            total=len(deliveries),
            successful=successful,
            failed=failed,
            status=status,
            message_id=message_id
        )

    async def get_dashboard_stats(self, user_id: str, launch_content_count: int) -> DashboardStats:
        connection = None
        try:
            connection = await get_db_connection()
            newsletters = NewsletterRepository(connection)
            return DashboardStats(
                newsletter_count=await newsletters.count_for_user(user_id),
                launch_content_count=launch_content_count,
                total_subscribers=await SubscriberRepository(connection).count_for_user(user_id),
                sent_count=await newsletters.count_for_user(user_id, NewsletterStatus.SENT.value)
            )
        finally:
            if connection:
                await release_db_connection(connection)

# Global service instance
newsletter_service = NewsletterService()
