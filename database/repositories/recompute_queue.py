import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import case, func, select, update
from sqlalchemy.sql import text as sql_text

from core.utils import utcnow
from database.dialect import upsert_insert
from database.models import PENDING_PREDICATE, RecomputeQueueItem
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

ENQUEUE_CHUNK_SIZE = 500

# (student_id, listing_id, tenant_id)
Pair = Tuple[Any, Any, Any]


class RecomputeQueueRepository(BaseRepository):
    """
    Durable recompute queue.

    Claiming is a two-step compare-and-set: candidate ids are selected with
    FOR UPDATE SKIP LOCKED (PostgreSQL; ignored on SQLite), then each is
    flipped pending -> processing with a guarded UPDATE. Only a rowcount of 1
    means this worker owns the item. Every later transition (renew, done,
    failed, cancelled) is guarded on claimed_by, so a worker whose lease
    expired cannot touch an item another worker has since claimed.
    """
    model = RecomputeQueueItem

    def enqueue(
        self,
        pairs: Iterable[Pair],
        reason: str,
        priority: int,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Enqueue pairs for recomputation, deduplicating against pending items.

        A pair that already has a pending item keeps it (and its position),
        but its priority and reason are raised when the new reason outranks it.
        Returns the number of distinct pairs submitted.
        """
        now = now or utcnow()
        unique: Dict[Tuple[Any, Any], Any] = {}
        for student_id, listing_id, tenant_id in pairs:
            unique.setdefault((student_id, listing_id), tenant_id)
        if not unique:
            return 0

        rows = [
            {
                'student_id': student_id,
                'listing_id': listing_id,
                'tenant_id': tenant_id,
                'priority': priority,
                'reason': reason,
                'status': 'pending',
                'enqueued_at': now,
                'available_at': now,
                'attempts': 0,
            }
            for (student_id, listing_id), tenant_id in unique.items()
        ]

        for start in range(0, len(rows), ENQUEUE_CHUNK_SIZE):
            stmt = upsert_insert(self.db, RecomputeQueueItem).values(rows[start:start + ENQUEUE_CHUNK_SIZE])
            outranks = stmt.excluded.priority > RecomputeQueueItem.priority
            stmt = stmt.on_conflict_do_update(
                index_elements=['student_id', 'listing_id'],
                index_where=sql_text(PENDING_PREDICATE),
                set_={
                    'priority': case((outranks, stmt.excluded.priority), else_=RecomputeQueueItem.priority),
                    'reason': case((outranks, stmt.excluded.reason), else_=RecomputeQueueItem.reason),
                }
            )
            self.db.execute(stmt)

        logger.info(f"Enqueued {len(rows)} pairs for recompute (reason={reason}, priority={priority})")
        return len(rows)

    def claim(
        self,
        worker_id: str,
        batch_size: int,
        lease_seconds: int,
        now: Optional[datetime] = None,
    ) -> List[RecomputeQueueItem]:
        now = now or utcnow()
        candidates = select(RecomputeQueueItem.id).where(
            RecomputeQueueItem.status == 'pending',
            RecomputeQueueItem.available_at <= now,
        ).order_by(
            RecomputeQueueItem.priority.desc(),
            RecomputeQueueItem.enqueued_at.asc(),
            RecomputeQueueItem.id.asc(),
        ).limit(batch_size).with_for_update(skip_locked=True)
        candidate_ids = list(self.db.execute(candidates).scalars().all())

        lease_expires_at = now + timedelta(seconds=lease_seconds)
        claimed_ids = []
        for item_id in candidate_ids:
            result = self.db.execute(
                update(RecomputeQueueItem).where(
                    RecomputeQueueItem.id == item_id,
                    RecomputeQueueItem.status == 'pending',
                ).values(
                    status='processing',
                    claimed_by=worker_id,
                    claimed_at=now,
                    lease_expires_at=lease_expires_at,
                    attempts=RecomputeQueueItem.attempts + 1,
                ).execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                claimed_ids.append(item_id)

        if not claimed_ids:
            return []

        stmt = select(RecomputeQueueItem).where(
            RecomputeQueueItem.id.in_(claimed_ids)
        ).order_by(
            RecomputeQueueItem.priority.desc(),
            RecomputeQueueItem.enqueued_at.asc(),
            RecomputeQueueItem.id.asc(),
        ).execution_options(populate_existing=True)
        items = list(self.db.execute(stmt).scalars().all())
        logger.debug(f"Worker {worker_id} claimed {len(items)} items")
        return items

    @staticmethod
    def _owned_by(item_id: Any, worker_id: str):
        return (
            RecomputeQueueItem.id == item_id,
            RecomputeQueueItem.status == 'processing',
            RecomputeQueueItem.claimed_by == worker_id,
        )

    def renew_lease(
        self,
        item_id: Any,
        worker_id: str,
        lease_seconds: int,
        now: Optional[datetime] = None,
    ) -> bool:
        """Extend this worker's lease; False means the claim was lost."""
        now = now or utcnow()
        result = self.db.execute(
            update(RecomputeQueueItem).where(
                *self._owned_by(item_id, worker_id)
            ).values(
                lease_expires_at=now + timedelta(seconds=lease_seconds),
            ).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def mark_done(self, item_id: Any, worker_id: str, now: Optional[datetime] = None) -> bool:
        result = self.db.execute(
            update(RecomputeQueueItem).where(
                *self._owned_by(item_id, worker_id)
            ).values(
                status='done',
                processed_at=now or utcnow(),
                lease_expires_at=None,
                last_error=None,
            ).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _has_other_pending(self, item: RecomputeQueueItem) -> bool:
        stmt = select(func.count(RecomputeQueueItem.id)).where(
            RecomputeQueueItem.student_id == item.student_id,
            RecomputeQueueItem.listing_id == item.listing_id,
            RecomputeQueueItem.status == 'pending',
            RecomputeQueueItem.id != item.id,
        )
        return (self.db.execute(stmt).scalar() or 0) > 0

    def _retry_or_fail(
        self,
        item: RecomputeQueueItem,
        error: str,
        max_attempts: int,
        retry_at: datetime,
        now: datetime,
    ) -> str:
        item.last_error = error
        item.claimed_by = None
        item.lease_expires_at = None
        if item.attempts >= max_attempts:
            item.status = 'failed'
            item.processed_at = now
        elif self._has_other_pending(item):
            # A newer pending item for the pair will do the recompute
            item.status = 'cancelled'
            item.processed_at = now
        else:
            item.status = 'pending'
            item.available_at = retry_at
        self.db.flush()
        return item.status

    def mark_failed(
        self,
        item_id: Any,
        worker_id: str,
        error: str,
        max_attempts: int,
        backoff_seconds: float,
        now: Optional[datetime] = None,
    ) -> Optional[str]:
        """
        Record a failed attempt; returns the item's new status.

        Returns None when worker_id no longer holds the claim (its lease
        expired and the item was reclaimed), leaving the item untouched.
        """
        now = now or utcnow()
        item = self.db.get(
            RecomputeQueueItem, item_id, populate_existing=True, with_for_update=True
        )
        if item is None or item.status != 'processing' or item.claimed_by != worker_id:
            return None
        status = self._retry_or_fail(
            item, error, max_attempts, now + timedelta(seconds=backoff_seconds), now
        )
        if status == 'failed':
            logger.error(f"Recompute item {item_id} failed permanently after {item.attempts} attempts: {error}")
        else:
            logger.warning(f"Recompute item {item_id} attempt {item.attempts} failed ({status}): {error}")
        return status

    def reclaim_expired(self, max_attempts: int, now: Optional[datetime] = None) -> int:
        """Return processing items whose lease expired to pending (or failed)."""
        now = now or utcnow()
        stmt = select(RecomputeQueueItem).where(
            RecomputeQueueItem.status == 'processing',
            RecomputeQueueItem.lease_expires_at < now,
        ).with_for_update(skip_locked=True)
        expired = list(self.db.execute(stmt).scalars().all())
        for item in expired:
            self._retry_or_fail(item, 'lease expired', max_attempts, now, now)
        if expired:
            logger.warning(f"Reclaimed {len(expired)} recompute items with expired leases")
        return len(expired)

    def _cancel_pending(self, *criteria) -> int:
        stmt = update(RecomputeQueueItem).where(
            RecomputeQueueItem.status == 'pending', *criteria
        ).values(
            status='cancelled',
            processed_at=utcnow(),
        ).execution_options(synchronize_session=False)
        return self.db.execute(stmt).rowcount or 0

    def cancel_for_student(self, student_id: Any) -> int:
        count = self._cancel_pending(RecomputeQueueItem.student_id == student_id)
        if count > 0:
            logger.info(f"Cancelled {count} pending items for student {student_id}")
        return count

    def cancel_for_listing(self, listing_id: Any) -> int:
        count = self._cancel_pending(RecomputeQueueItem.listing_id == listing_id)
        if count > 0:
            logger.info(f"Cancelled {count} pending items for listing {listing_id}")
        return count

    def cancel_item(self, item_id: Any, worker_id: str, reason: str) -> bool:
        result = self.db.execute(
            update(RecomputeQueueItem).where(
                *self._owned_by(item_id, worker_id)
            ).values(
                status='cancelled',
                last_error=reason,
                processed_at=utcnow(),
                lease_expires_at=None,
            ).execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def get_counts(self, tenant_id: Any = None) -> Dict[str, int]:
        stmt = select(RecomputeQueueItem.status, func.count(RecomputeQueueItem.id)).group_by(
            RecomputeQueueItem.status
        )
        if tenant_id is not None:
            stmt = stmt.where(RecomputeQueueItem.tenant_id == tenant_id)
        by_status = {status: int(count) for status, count in self.db.execute(stmt).all()}

        return {
            'pending': by_status.get('pending', 0) + by_status.get('processing', 0),
            'processed': by_status.get('done', 0),
            'failed': by_status.get('failed', 0),
            'total': sum(by_status.values()),
        }
