from dataclasses import replace

import pytest

from estimate.models import DEFAULT_VELOCITY_PROFILE
from estimate.velocity import (
    compute_velocity_profile,
    estimation_accuracy,
    history_for_user,
    member_metrics,
    profile_for_user,
    round_half_up,
)


def test_cold_start_profile_is_exact_defaults(make_issue, alice):
    # open and unestimated issues never count as history
    issues = [
        make_issue('A-1', estimate=3, assignee=alice),
        make_issue('A-2', estimate=None, assignee=alice, done_days=2),
    ]
    profile = profile_for_user(issues, alice.user_id)
    assert profile == DEFAULT_VELOCITY_PROFILE
    assert profile.avg_points_per_day == 2.0
    assert profile.avg_time_per_point == 1.0
    assert profile.complexity_preference == 'medium'
    assert profile.estimation_accuracy == 0.5


def test_profile_from_history(make_issue, alice):
    issues = [
        make_issue('A-1', estimate=2, assignee=alice, done_days=2),
        make_issue('A-2', estimate=2, assignee=alice, done_days=2),
    ]
    profile = compute_velocity_profile(issues)
    # 4 points over 2 issues * 2 days
    assert profile.avg_points_per_day == pytest.approx(1.0)
    assert profile.avg_time_per_point == pytest.approx(1.0)
    assert profile.complexity_preference == 'simple'
    # identical durations: no spread
    assert profile.estimation_accuracy == pytest.approx(1.0)


def test_complexity_preference_thresholds(make_issue, alice):
    medium = compute_velocity_profile([make_issue('A-1', estimate=8, assignee=alice, done_days=4)])
    complex_ = compute_velocity_profile([make_issue('A-2', estimate=13, assignee=alice, done_days=4)])
    assert medium.complexity_preference == 'medium'
    assert complex_.complexity_preference == 'complex'


def test_zero_duration_history_uses_fallbacks(make_issue, alice):
    profile = compute_velocity_profile([make_issue('A-1', estimate=3, assignee=alice, done_days=0)])
    assert profile.avg_points_per_day == 2.0
    assert profile.avg_time_per_point == 1.0
    assert profile.estimation_accuracy == 1.0


def test_estimation_accuracy_floor():
    # very inconsistent completion times bottom out at 0.1
    assert estimation_accuracy([0.1, 100.0]) == pytest.approx(0.1)
    assert estimation_accuracy([1.0, 3.0]) == pytest.approx(0.5)


def test_history_only_for_user(make_issue, alice, bob):
    issues = [
        make_issue('A-1', estimate=2, assignee=alice, done_days=1),
        make_issue('B-1', estimate=5, assignee=bob, done_days=1),
    ]
    assert [i.identifier for i in history_for_user(issues, alice.user_id)] == ['A-1']


def test_member_metrics(make_issue, alice):
    issues = [
        make_issue('A-1', estimate=3, assignee=alice, done_days=2),
        make_issue('A-2', estimate=None, assignee=alice, done_days=4),
        make_issue('A-3', estimate=None, assignee=alice),
    ]
    metrics = member_metrics(issues)
    assert metrics.completed_count == 2
    assert metrics.total_estimate == 3.0
    assert metrics.avg_time_to_complete == 3.0
    assert metrics.estimate_accuracy == 50
    assert metrics.issues_without_estimate == 2


def test_member_metrics_empty():
    metrics = member_metrics([])
    assert metrics.completed_count == 0
    assert metrics.avg_time_to_complete == 0.0
    assert metrics.estimate_accuracy == 0


def test_issue_without_creation_time_skips_duration(make_issue, alice):
    undated = replace(make_issue('A-1', estimate=5, assignee=alice, done_days=1), created_at=None)
    dated = make_issue('A-2', estimate=2, assignee=alice, done_days=2)
    profile = profile_for_user([undated, dated], alice.user_id)
    # points count for both issues, days only for the dated one
    assert profile.avg_points_per_day == pytest.approx(7 / 4)
    assert profile.estimation_accuracy == 1.0
    metrics = member_metrics([undated, dated])
    assert metrics.completed_count == 2
    assert metrics.avg_time_to_complete == 2.0


def test_round_half_up():
    assert round_half_up(0.25) == 0.3
    assert round_half_up(2.35) == 2.4
    assert round_half_up(0.24) == 0.2
    assert round_half_up(12.5, 0) == 13.0
    assert round_half_up(0.0) == 0.0
