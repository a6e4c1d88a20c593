#!/usr/bin/env python3
"""
Unit tests for the six signal evaluators.
"""

import unittest
from datetime import date, timedelta
from unittest.mock import patch

from core.matching.models import (
    AvailabilityWindow,
    EngagementRecord,
    ListingProfile,
    SignalName,
    SkillEntry,
    StudentProfile,
)
from core.matching.signals import (
    SIGNAL_EVALUATORS,
    EvaluationContext,
    evaluate_growth,
    evaluate_network,
    evaluate_signals,
    evaluate_skills,
    evaluate_sustainability,
    evaluate_temporal,
    evaluate_trust,
)
from core.matching.signals.growth import gap_score


def student(**kwargs):
    skills = kwargs.pop('skills', [])
    return StudentProfile(id="s1", skills=[SkillEntry(name=s) for s in skills], **kwargs)


def listing(**kwargs):
    return ListingProfile(id="l1", **kwargs)


def windows(*available, travel_days=None):
    travel_days = travel_days or {}
    start = date(2026, 9, 7)
    result = []
    for i, hours in enumerate(available):
        week_start = start + timedelta(weeks=i)
        result.append(AvailabilityWindow(
            week_start=week_start,
            week_end=week_start + timedelta(days=6),
            available_hours=hours,
            total_committed_hours=40 - hours,
            travel_days=travel_days.get(i, 0),
        ))
    return result


CTX = EvaluationContext()


class TestSkillsSignal(unittest.TestCase):

    def test_two_of_three_required_skills(self):
        result = evaluate_skills(
            student(skills=["python", "SQL"]),
            listing(skills_required=["Python", "SQL", "React"]),
            [], CTX,
        )
        self.assertAlmostEqual(result.score, 2 / 3)
        self.assertEqual(result.details['matched_skills'], ["Python", "SQL"])
        self.assertEqual(result.details['missing_skills'], ["React"])
        self.assertFalse(result.fallback)

    def test_no_required_skills_is_full_score(self):
        result = evaluate_skills(student(skills=["Python"]), listing(), [], CTX)
        self.assertEqual(result.score, 1.0)

    def test_duplicate_requirements_count_once(self):
        result = evaluate_skills(
            student(skills=["python"]),
            listing(skills_required=["Python", "python ", "Go"]),
            [], CTX,
        )
        self.assertEqual(result.details['required_count'], 2)
        self.assertAlmostEqual(result.score, 0.5)


class TestTemporalSignal(unittest.TestCase):

    def test_enough_hours_saturates(self):
        result = evaluate_temporal(student(), listing(hours_per_week=20), windows(20, 20, 20), CTX)
        self.assertEqual(result.score, 1.0)

    def test_shortfall_scores_below_one(self):
        result = evaluate_temporal(student(), listing(hours_per_week=18), windows(10, 10), CTX)
        self.assertLess(result.score, 1.0)
        self.assertAlmostEqual(result.score, 1 - 8 / 18)

    def test_more_availability_never_scores_lower(self):
        scores = [
            evaluate_temporal(student(), listing(hours_per_week=20), windows(h, h), CTX).score
            for h in (0, 5, 10, 15, 20, 25)
        ]
        self.assertEqual(scores, sorted(scores))

    def test_travel_in_critical_weeks_penalized(self):
        result = evaluate_temporal(
            student(), listing(hours_per_week=20), windows(30, 30, 30, travel_days={0: 2}), CTX
        )
        self.assertAlmostEqual(result.score, 0.2)
        self.assertTrue(result.details['travel_in_critical_weeks'])

    def test_travel_after_critical_weeks_not_penalized(self):
        result = evaluate_temporal(
            student(), listing(hours_per_week=20), windows(30, 30, 30, travel_days={2: 2}), CTX
        )
        self.assertEqual(result.score, 1.0)

    def test_missing_required_hours_is_neutral(self):
        result = evaluate_temporal(student(), listing(), windows(20), CTX)
        self.assertTrue(result.fallback)
        self.assertEqual(result.score, 0.5)


class TestSustainabilitySignal(unittest.TestCase):

    def test_unknown_history_is_neutral(self):
        result = evaluate_sustainability(student(), listing(hours_per_week=10), [], CTX)
        self.assertTrue(result.fallback)

    def test_free_student_scores_full(self):
        result = evaluate_sustainability(student(engagements=[]), listing(hours_per_week=10), [], CTX)
        self.assertEqual(result.score, 1.0)

    def test_busy_student_scores_lower(self):
        history = [
            EngagementRecord(listing_id="a", status="accepted", hours_per_week=15),
            EngagementRecord(listing_id="b", status="accepted", hours_per_week=15),
            EngagementRecord(listing_id="c", status="completed", hours_per_week=20),
        ]
        result = evaluate_sustainability(student(engagements=history), listing(hours_per_week=15), [], CTX)
        # 45h total -> 0.65 workload, 2 concurrent -> 0.75
        self.assertAlmostEqual(result.score, 0.7 * 0.65 + 0.3 * 0.75)
        self.assertEqual(result.details['active_engagements'], 2)

    def test_engagement_on_same_listing_not_double_counted(self):
        history = [EngagementRecord(listing_id="l1", status="accepted", hours_per_week=40)]
        result = evaluate_sustainability(student(engagements=history), listing(hours_per_week=10), [], CTX)
        self.assertEqual(result.score, 1.0)


class TestGrowthSignal(unittest.TestCase):

    def test_gap_curve(self):
        self.assertEqual(gap_score(0.3), 1.0)
        self.assertAlmostEqual(gap_score(0.0), 0.6)
        self.assertAlmostEqual(gap_score(0.5), 0.725)
        self.assertAlmostEqual(gap_score(1.0), 0.1)

    def test_no_interests_is_neutral(self):
        result = evaluate_growth(student(), listing(skills_required=["Go"]), [], CTX)
        self.assertTrue(result.fallback)

    def test_interesting_new_skill_scores_full(self):
        result = evaluate_growth(
            student(skills=["python", "sql", "react"], interests=["Docker"]),
            listing(skills_required=["Python", "SQL", "React", "Docker"]),
            [], CTX,
        )
        self.assertAlmostEqual(result.score, 1.0)
        self.assertEqual(result.details['new_skills'], ["docker"])

    def test_uninteresting_new_skill(self):
        result = evaluate_growth(
            student(skills=["python", "sql", "react"], interests=["painting"]),
            listing(skills_required=["Python", "SQL", "React", "Docker"]),
            [], CTX,
        )
        self.assertAlmostEqual(result.score, 0.6 * 0.3 + 0.4 * 1.0)

    def test_nothing_new_scores_low(self):
        result = evaluate_growth(
            student(skills=["python"], interests=["python"]),
            listing(skills_required=["Python"]),
            [], CTX,
        )
        self.assertAlmostEqual(result.score, 0.6 * 0.2 + 0.4 * 0.6)


class TestTrustSignal(unittest.TestCase):

    def test_unknown_history_is_neutral(self):
        self.assertTrue(evaluate_trust(student(), listing(), [], CTX).fallback)

    def test_new_user_prior(self):
        result = evaluate_trust(student(engagements=[]), listing(), [], CTX)
        self.assertEqual(result.score, 0.55)
        self.assertFalse(result.fallback)

    def test_track_record(self):
        history = [
            EngagementRecord(listing_id="a", status="completed", rating=5),
            EngagementRecord(listing_id="b", status="completed", rating=5),
            EngagementRecord(listing_id="c", status="dropped", rating=4),
        ]
        result = evaluate_trust(student(engagements=history), listing(), [], CTX)
        rating = (1.0 + 1.0 + 0.75) / 3
        self.assertAlmostEqual(result.score, 0.6 * (2 / 3) + 0.4 * rating)

    def test_thin_rating_sample_regressed_to_prior(self):
        history = [EngagementRecord(listing_id="a", status="completed", rating=5)]
        result = evaluate_trust(student(engagements=history), listing(), [], CTX)
        self.assertAlmostEqual(result.score, 0.6 * 1.0 + 0.4 * ((1.0 + 2 * 0.55) / 3))


class TestNetworkSignal(unittest.TestCase):

    def test_same_tenant(self):
        result = evaluate_network(student(tenant_id="t1"), listing(tenant_id="t1"), [], CTX)
        self.assertEqual(result.score, 1.0)

    def test_shared_network(self):
        result = evaluate_network(
            student(tenant_id="t1", network_ids=["ncaa-east"]),
            listing(tenant_id="t2", visibility="network", network_ids=["ncaa-east"]),
            [], CTX,
        )
        self.assertEqual(result.score, 0.75)

    def test_network_visible_without_shared_network(self):
        result = evaluate_network(
            student(tenant_id="t1"), listing(tenant_id="t2", visibility="network"), [], CTX
        )
        self.assertEqual(result.score, 0.4)

    def test_cross_tenant_with_alumni_bonus(self):
        result = evaluate_network(
            student(tenant_id="t1", university="Holy Cross"),
            listing(tenant_id="t2", owner_alumni_institution="holy cross "),
            [], CTX,
        )
        self.assertAlmostEqual(result.score, 0.3)
        self.assertTrue(result.details['alumni_bonus'])

    def test_bonus_is_clamped(self):
        result = evaluate_network(
            student(tenant_id="t1", university="Holy Cross"),
            listing(tenant_id="t1", owner_alumni_institution="Holy Cross"),
            [], CTX,
        )
        self.assertEqual(result.score, 1.0)

    def test_unknown_tenant_is_neutral(self):
        self.assertTrue(evaluate_network(student(), listing(tenant_id="t1"), [], CTX).fallback)


class TestEvaluateSignals(unittest.TestCase):

    def test_runs_every_signal_in_order(self):
        results = evaluate_signals(student(), listing(), [], CTX)
        self.assertEqual([r.signal for r in results], list(SignalName))
        for r in results:
            self.assertGreaterEqual(r.score, 0.0)
            self.assertLessEqual(r.score, 1.0)

    def test_data_error_becomes_neutral_fallback(self):
        def broken(*args):
            raise KeyError("rating")

        with patch.dict(SIGNAL_EVALUATORS, {SignalName.TRUST: broken}):
            results = evaluate_signals(student(engagements=[]), listing(), [], CTX)

        trust = results[list(SignalName).index(SignalName.TRUST)]
        self.assertTrue(trust.fallback)
        self.assertEqual(trust.score, 0.5)

    def test_unexpected_error_propagates(self):
        def broken(*args):
            raise RuntimeError("database went away")

        with patch.dict(SIGNAL_EVALUATORS, {SignalName.SKILLS: broken}):
            with self.assertRaises(RuntimeError):
                evaluate_signals(student(), listing(), [], CTX)


if __name__ == '__main__':
    unittest.main()
