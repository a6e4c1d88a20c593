import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, distinct, func, select, update

from core.matching.models import CompositeResult
from core.utils import utcnow
from database.dialect import upsert_insert
from database.models import Listing, MatchScore, MatchScoreHistory, Student
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class MatchScoreRepository(BaseRepository):
    """
    Score store: one MatchScore row per (student, listing) pair.

    Rows are only ever upserted or flagged stale, never deleted here;
    stale rows stay readable until the worker recomputes them.
    """
    model = MatchScore

    def get_score(self, student_id: Any, listing_id: Any) -> Optional[MatchScore]:
        stmt = select(MatchScore).where(
            MatchScore.student_id == student_id,
            MatchScore.listing_id == listing_id,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert(
        self,
        student_id: Any,
        listing_id: Any,
        tenant_id: Any,
        result: CompositeResult,
        computation_ms: int,
        computed_at: Optional[datetime] = None,
        reason: Optional[str] = None,
    ) -> MatchScore:
        """
        Insert or overwrite the score for a pair and clear its stale flag.

        Last write wins. A history row is written when the pair is scored for
        the first time or the composite changes.
        """
        computed_at = computed_at or utcnow()
        previous = self.db.execute(
            select(MatchScore.composite_score).where(
                MatchScore.student_id == student_id,
                MatchScore.listing_id == listing_id,
            )
        ).scalar_one_or_none()

        values = {
            'student_id': student_id,
            'listing_id': listing_id,
            'tenant_id': tenant_id,
            'composite_score': result.composite_score,
            'signals': result.signals,
            'matched_skills': result.matched_skills,
            'missing_skills': result.missing_skills,
            'is_stale': False,
            'weights_version': result.weights_version,
            'computed_at': computed_at,
            'computation_ms': computation_ms,
        }
        stmt = upsert_insert(self.db, MatchScore).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=['student_id', 'listing_id'],
            set_={
                'tenant_id': stmt.excluded.tenant_id,
                'composite_score': stmt.excluded.composite_score,
                'signals': stmt.excluded.signals,
                'matched_skills': stmt.excluded.matched_skills,
                'missing_skills': stmt.excluded.missing_skills,
                'is_stale': False,
                'weights_version': stmt.excluded.weights_version,
                'computed_at': stmt.excluded.computed_at,
                'computation_ms': stmt.excluded.computation_ms,
            }
        )
        self.db.execute(stmt)

        if previous is None or previous != result.composite_score:
            self.db.add(MatchScoreHistory(
                student_id=student_id,
                listing_id=listing_id,
                composite_score=result.composite_score,
                previous_score=previous,
                signals=result.signals,
                weights_version=result.weights_version,
                reason=reason,
                computed_at=computed_at,
            ))

        self.db.flush()
        return self.db.execute(
            select(MatchScore).where(
                MatchScore.student_id == student_id,
                MatchScore.listing_id == listing_id,
            ).execution_options(populate_existing=True)
        ).scalar_one()

    def _mark_stale(self, *criteria) -> int:
        stmt = update(MatchScore).where(
            MatchScore.is_stale.is_(False), *criteria
        ).values(is_stale=True).execution_options(synchronize_session=False)
        return self.db.execute(stmt).rowcount or 0

    def mark_stale_for_student(self, student_id: Any) -> int:
        count = self._mark_stale(MatchScore.student_id == student_id)
        if count > 0:
            logger.info(f"Marked {count} scores stale for student {student_id}")
        return count

    def mark_stale_for_listing(self, listing_id: Any) -> int:
        count = self._mark_stale(MatchScore.listing_id == listing_id)
        if count > 0:
            logger.info(f"Marked {count} scores stale for listing {listing_id}")
        return count

    def mark_stale_older_than(self, cutoff: datetime, tenant_id: Any = None) -> int:
        criteria = [MatchScore.computed_at < cutoff]
        if tenant_id is not None:
            criteria.append(MatchScore.tenant_id == tenant_id)
        count = self._mark_stale(*criteria)
        if count > 0:
            logger.info(f"Marked {count} scores stale computed before {cutoff.isoformat()}")
        return count

    def mark_all_stale(self, tenant_id: Any = None) -> int:
        criteria = [MatchScore.tenant_id == tenant_id] if tenant_id is not None else []
        count = self._mark_stale(*criteria)
        logger.info(f"Marked {count} scores stale (tenant={tenant_id or 'all'})")
        return count

    def get_stale_pairs(self, tenant_id: Any = None) -> List[Tuple[Any, Any, Any]]:
        stmt = select(MatchScore.student_id, MatchScore.listing_id, MatchScore.tenant_id).where(
            MatchScore.is_stale.is_(True)
        )
        if tenant_id is not None:
            stmt = stmt.where(MatchScore.tenant_id == tenant_id)
        stmt = stmt.order_by(MatchScore.computed_at, MatchScore.id)
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def get_scored_student_ids(self, listing_id: Any) -> List[Any]:
        stmt = select(MatchScore.student_id).where(MatchScore.listing_id == listing_id)
        return list(self.db.execute(stmt).scalars().all())

    def get_scored_listing_ids(self, student_id: Any) -> List[Any]:
        stmt = select(MatchScore.listing_id).where(MatchScore.student_id == student_id)
        return list(self.db.execute(stmt).scalars().all())

    def get_top_for_listing(self, listing_id: Any, limit: int = 50) -> List[Tuple[MatchScore, Student]]:
        """Highest composite first; ties go to the earliest computed score."""
        stmt = select(MatchScore, Student).join(
            Student, Student.id == MatchScore.student_id
        ).where(
            MatchScore.listing_id == listing_id
        ).order_by(
            MatchScore.composite_score.desc(),
            MatchScore.computed_at.asc(),
            MatchScore.id.asc(),
        ).limit(limit)
        return [(row[0], row[1]) for row in self.db.execute(stmt).all()]

    def get_top_for_student(self, student_id: Any, limit: int = 50) -> List[Tuple[MatchScore, Listing]]:
        stmt = select(MatchScore, Listing).join(
            Listing, Listing.id == MatchScore.listing_id
        ).where(
            MatchScore.student_id == student_id
        ).order_by(
            MatchScore.composite_score.desc(),
            MatchScore.computed_at.asc(),
            MatchScore.id.asc(),
        ).limit(limit)
        return [(row[0], row[1]) for row in self.db.execute(stmt).all()]

    def get_history(self, student_id: Any, listing_id: Any) -> List[MatchScoreHistory]:
        stmt = select(MatchScoreHistory).where(
            MatchScoreHistory.student_id == student_id,
            MatchScoreHistory.listing_id == listing_id,
        ).order_by(MatchScoreHistory.computed_at, MatchScoreHistory.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_stats(self, tenant_id: Any = None) -> Dict[str, Any]:
        stmt = select(
            func.count(MatchScore.id),
            func.sum(case((MatchScore.is_stale.is_(True), 1), else_=0)),
            func.avg(MatchScore.composite_score),
            func.max(MatchScore.composite_score),
            func.min(MatchScore.composite_score),
            func.avg(MatchScore.computation_ms),
            func.count(distinct(MatchScore.student_id)),
            func.count(distinct(MatchScore.listing_id)),
        )
        if tenant_id is not None:
            stmt = stmt.where(MatchScore.tenant_id == tenant_id)
        row = self.db.execute(stmt).one()

        return {
            'total_scores': int(row[0] or 0),
            'stale_scores': int(row[1] or 0),
            'avg_score': round(float(row[2]), 2) if row[2] is not None else 0.0,
            'max_score': int(row[3]) if row[3] is not None else 0,
            'min_score': int(row[4]) if row[4] is not None else 0,
            'avg_computation_ms': round(float(row[5]), 2) if row[5] is not None else 0.0,
            'unique_students': int(row[6] or 0),
            'unique_listings': int(row[7] or 0),
        }
