#!/usr/bin/env python3
"""
Recompute Worker - drains the recompute queue.

Each cycle:
1. Sweep: return items whose lease expired to pending (or failed).
2. TTL sweep (every ttl_sweep_interval_seconds): flag old scores stale.
3. Claim a batch (priority desc, enqueued_at asc) and recompute each pair
   in its own transaction, renewing the lease first. Results for an item
   whose claim passed to another worker are rolled back. A failure sends
   the item back with exponential backoff until max_attempts, then marks
   it failed.

Any number of workers may run concurrently against the same database.
"""

import logging
import socket
import os
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

from core.config_loader import AppConfig
from core.matching.engine import EntityNotFoundError, MatchEngine
from core.matching.staleness import StalenessTracker
from core.utils import utcnow
from database.uow import match_uow
from recompute.service import RecomputeService

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    claimed: int = 0
    done: int = 0
    retried: int = 0
    failed: int = 0
    cancelled: int = 0
    reclaimed: int = 0
    lost: int = 0


class LeaseLostError(Exception):
    """The item was reclaimed and claimed by another worker mid-flight."""


def default_worker_id() -> str:
    return f"{socket.gethostname()}-{os.getpid()}"


class RecomputeWorker:
    def __init__(
        self,
        config: AppConfig,
        engine: MatchEngine,
        worker_id: Optional[str] = None,
        session_factory=None,
    ):
        self.config = config
        self.engine = engine
        self.worker_id = worker_id or default_worker_id()
        self.session_factory = session_factory
        self.tracker = StalenessTracker(config.scoring)
        self.service = RecomputeService(config, self.tracker)
        self._last_ttl_sweep: Optional[float] = None

    def _uow(self):
        return match_uow(self.session_factory)

    def sweep_expired_leases(self, now: Optional[datetime] = None) -> int:
        with self._uow() as repos:
            return repos.queue.reclaim_expired(self.config.queue.max_attempts, now=now)

    def maybe_sweep_ttl(self, now: Optional[datetime] = None) -> int:
        interval = self.config.queue.ttl_sweep_interval_seconds
        current = time.monotonic()
        if self._last_ttl_sweep is not None and current - self._last_ttl_sweep < interval:
            return 0
        self._last_ttl_sweep = current
        with self._uow() as repos:
            outcome = self.tracker.expire_ttl(repos, now=now)
        if outcome.scores_marked_stale:
            logger.info(f"TTL sweep marked {outcome.scores_marked_stale} scores stale")
        return outcome.scores_marked_stale

    def _claim(self, now: Optional[datetime]) -> List[Tuple[Any, Any, Any, str, int]]:
        queue_cfg = self.config.queue
        with self._uow() as repos:
            items = repos.queue.claim(
                self.worker_id,
                batch_size=queue_cfg.batch_size,
                lease_seconds=queue_cfg.lease_seconds,
                now=now,
            )
            # Detach plain values before the session closes
            return [(i.id, i.student_id, i.listing_id, i.reason, i.attempts) for i in items]

    def _renew(self, item_id: Any, now: Optional[datetime]) -> bool:
        with self._uow() as repos:
            return repos.queue.renew_lease(
                item_id, self.worker_id, self.config.queue.lease_seconds, now=now
            )

    def _process_item(self, item, result: CycleResult, now: Optional[datetime]) -> None:
        item_id, student_id, listing_id, reason, attempts = item
        # The batch shares one claim timestamp; restart the lease for this item
        if not self._renew(item_id, now):
            logger.warning(f"Worker {self.worker_id} lost claim on item {item_id} before processing")
            result.lost += 1
            return

        try:
            with self._uow() as repos:
                self.engine.compute_pair(repos, student_id, listing_id, reason=reason, as_of=now)
                if not repos.queue.mark_done(item_id, self.worker_id, now=now):
                    raise LeaseLostError(f"claim on item {item_id} was taken over")
            result.done += 1
        except LeaseLostError as e:
            logger.warning(f"Worker {self.worker_id} discarded result: {e}")
            result.lost += 1
        except EntityNotFoundError as e:
            logger.info(f"Cancelling recompute item {item_id}: {e}")
            with self._uow() as repos:
                cancelled = repos.queue.cancel_item(item_id, self.worker_id, str(e))
            if cancelled:
                result.cancelled += 1
            else:
                result.lost += 1
        except Exception as e:
            logger.error(
                f"Error recomputing student={student_id} listing={listing_id}: {e}", exc_info=True
            )
            with self._uow() as repos:
                status = repos.queue.mark_failed(
                    item_id,
                    self.worker_id,
                    error=f"{type(e).__name__}: {e}",
                    max_attempts=self.config.queue.max_attempts,
                    backoff_seconds=self.service.backoff_for(attempts),
                    now=now,
                )
            if status is None:
                logger.warning(f"Worker {self.worker_id} no longer owns item {item_id}; failure not recorded")
                result.lost += 1
            elif status == 'failed':
                result.failed += 1
            elif status == 'cancelled':
                result.cancelled += 1
            else:
                result.retried += 1

    def run_once(self, now: Optional[datetime] = None) -> CycleResult:
        """Run a single sweep + claim + process cycle."""
        result = CycleResult()
        result.reclaimed = self.sweep_expired_leases(now=now)
        self.maybe_sweep_ttl(now=now)

        claimed = self._claim(now)
        result.claimed = len(claimed)
        for item in claimed:
            self._process_item(item, result, now)

        if result.claimed:
            logger.info(
                f"Worker {self.worker_id}: claimed={result.claimed} done={result.done} "
                f"retried={result.retried} failed={result.failed} cancelled={result.cancelled} lost={result.lost}"
            )
        return result

    def run_forever(self, should_run: Callable[[], bool] = lambda: True, burst: bool = False) -> int:
        """
        Process the queue until should_run() turns False.

        In burst mode, exits as soon as a cycle claims nothing.
        Returns the number of items completed.
        """
        total_done = 0
        poll_interval = self.config.queue.poll_interval_seconds
        logger.info(f"Recompute worker {self.worker_id} started (burst={burst})")

        while should_run():
            try:
                result = self.run_once(now=utcnow())
            except Exception as e:
                logger.error(f"Error in worker loop: {e}", exc_info=True)
                result = CycleResult()

            total_done += result.done
            if result.claimed:
                continue
            if burst:
                break
            # Sleep in short chunks to allow responsive shutdown
            for _ in range(max(1, poll_interval)):
                if not should_run():
                    break
                time.sleep(1)

        logger.info(f"Recompute worker {self.worker_id} stopped after {total_done} recomputes")
        return total_done
