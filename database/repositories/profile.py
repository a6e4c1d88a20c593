import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.orm import selectinload

from core.matching.models import EngagementRecord, ListingProfile, SkillEntry, StudentProfile
from database.models import Listing, MatchScore, Student, Tenant
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository):
    """
    Read access to collaborator-owned students, listings and tenants.

    Converts ORM rows into the detached DTOs the signal evaluators consume.
    """
    model = Student

    def get_student(self, student_id: Any) -> Optional[Student]:
        return self.db.get(Student, student_id)

    def get_listing(self, listing_id: Any) -> Optional[Listing]:
        return self.db.get(Listing, listing_id)

    def _tenant_networks(self, tenant_id: Any) -> List[str]:
        if tenant_id is None:
            return []
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            return []
        return list(tenant.network_ids or [])

    def get_student_profile(self, student_id: Any) -> Optional[StudentProfile]:
        stmt = select(Student).where(Student.id == student_id).options(
            selectinload(Student.skills),
            selectinload(Student.engagements),
        )
        student = self.db.execute(stmt).scalar_one_or_none()
        if student is None:
            return None

        return StudentProfile(
            id=student.id,
            tenant_id=student.tenant_id,
            first_name=student.first_name,
            last_name=student.last_name,
            email=student.email,
            university=student.university,
            skills=[
                SkillEntry(name=s.name, category=s.category, proficiency_level=s.proficiency_level)
                for s in student.skills
            ],
            interests=list(student.interests) if student.interests is not None else None,
            engagements=[
                EngagementRecord(
                    listing_id=e.listing_id,
                    status=e.status,
                    hours_per_week=e.hours_per_week,
                    rating=e.rating,
                )
                for e in student.engagements
            ],
            network_ids=self._tenant_networks(student.tenant_id),
        )

    def get_listing_profile(self, listing_id: Any) -> Optional[ListingProfile]:
        listing = self.get_listing(listing_id)
        if listing is None:
            return None
        return ListingProfile(
            id=listing.id,
            tenant_id=listing.tenant_id,
            title=listing.title,
            skills_required=list(listing.skills_required or []),
            hours_per_week=listing.hours_per_week,
            start_date=listing.start_date,
            end_date=listing.end_date,
            status=listing.status,
            visibility=listing.visibility,
            network_ids=self._tenant_networks(listing.tenant_id),
            owner_alumni_institution=listing.owner_alumni_institution,
        )

    def candidate_listings_for_student(self, student: Student) -> List[Tuple[Any, Any]]:
        """(listing_id, tenant_id) of open listings in the student's tenant plus open network-visible ones."""
        stmt = select(Listing.id, Listing.tenant_id).where(
            Listing.status == 'open',
            or_(Listing.tenant_id == student.tenant_id, Listing.visibility == 'network'),
        ).order_by(Listing.id)
        return [(row[0], row[1]) for row in self.db.execute(stmt).all()]

    def candidate_student_ids_for_listing(self, listing: Listing) -> List[Any]:
        """Students who may see the listing, plus students who already have a score for it."""
        if listing.status != 'open':
            eligible = []
        else:
            stmt = select(Student.id)
            if listing.visibility != 'network':
                stmt = stmt.where(Student.tenant_id == listing.tenant_id)
            eligible = list(self.db.execute(stmt.order_by(Student.id)).scalars().all())

        scored = self.db.execute(
            select(MatchScore.student_id).where(MatchScore.listing_id == listing.id)
        ).scalars().all()

        seen = set(eligible)
        for student_id in scored:
            if student_id not in seen:
                eligible.append(student_id)
                seen.add(student_id)
        return eligible

