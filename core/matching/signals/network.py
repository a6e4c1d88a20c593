"""Network proximity between the student's tenant and the listing's tenant."""

from typing import List

from core.matching.models import AvailabilityWindow, ListingProfile, SignalName, SignalResult, StudentProfile
from core.matching.signals.base import EvaluationContext, neutral
from core.utils import clamp01

SAME_TENANT = 1.0
SHARED_NETWORK = 0.75
NETWORK_VISIBLE = 0.4
CROSS_TENANT = 0.1
ALUMNI_BONUS = 0.2


def evaluate_network(
    student: StudentProfile,
    listing: ListingProfile,
    windows: List[AvailabilityWindow],
    context: EvaluationContext,
) -> SignalResult:
    if student.tenant_id is None or listing.tenant_id is None:
        return neutral(SignalName.NETWORK, context, 'tenant unknown')

    shared = sorted(set(student.network_ids) & set(listing.network_ids))
    if student.tenant_id == listing.tenant_id:
        base, relation = SAME_TENANT, 'same_tenant'
    elif listing.visibility == 'network' and shared:
        base, relation = SHARED_NETWORK, 'shared_network'
    elif listing.visibility == 'network':
        base, relation = NETWORK_VISIBLE, 'network_visible'
    else:
        base, relation = CROSS_TENANT, 'cross_tenant'

    alumni = bool(
        listing.owner_alumni_institution
        and student.university
        and listing.owner_alumni_institution.strip().lower() == student.university.strip().lower()
    )
    score = base + (ALUMNI_BONUS if alumni else 0.0)

    return SignalResult(
        signal=SignalName.NETWORK,
        score=clamp01(score),
        details={
            'relation': relation,
            'shared_networks': shared,
            'alumni_bonus': alumni,
        },
    )
