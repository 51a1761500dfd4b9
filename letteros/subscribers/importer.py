# letteros/subscribers/importer.py
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from letteros.config import settings
from letteros.models.subscriber import (
    ImportProgress, ImportResult, ImportStatus, SubscriberCandidate
)

logger = logging.getLogger(__name__)

BatchWriter = Callable[[List[SubscriberCandidate]], Awaitable[None]]

def split_batches(candidates: Sequence[SubscriberCandidate], size: int) -> List[List[SubscriberCandidate]]:
    if size < 1:
        raise ValueError("Batch size must be positive")
    return [list(candidates[i:i + size]) for i in range(0, len(candidates), size)]

async def commit_in_batches(
    candidates: Sequence[SubscriberCandidate],
    write_batch: BatchWriter,
    batch_size: Optional[int] = None
) -> ImportResult:
    """Write candidates batch by batch, in order.

    Each batch commits on its own. The first failing batch stops the import;
    batches committed before it stay committed and are the only ones counted.
    """
    size = batch_size or settings.import_batch_size
    total = len(candidates)
    imported = 0
    committed = 0
    progress: List[ImportProgress] = []

    for batch in split_batches(candidates, size):
        try:
            await write_batch(batch)
        except Exception as e:
            logger.error(f"Subscriber import batch {committed + 1} failed after {imported}/{total}: {e}")
            return ImportResult(
                status=ImportStatus.ERROR,
                imported=imported,
                total=total,
                batches_committed=committed,
                progress=progress,
                error=str(e)
            )

        imported += len(batch)
        committed += 1
        progress.append(ImportProgress(imported=imported, total=total))
        logger.info(f"Subscriber import progress: {imported}/{total}")

    return ImportResult(
        status=ImportStatus.COMPLETED,
        imported=imported,
        total=total,
        batches_committed=committed,
        progress=progress
    )
