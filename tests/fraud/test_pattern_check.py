from datetime import timedelta

from src.attendance_guard.attendance_guard.core.enums import ReasonCode
from src.attendance_guard.attendance_guard.fraud.checks.pattern_check import PatternCheck


def test_empty_history_is_not_suspicious(fixed_now):
    assert PatternCheck().analyze_patterns([], now=fixed_now, claim_time=fixed_now).penalty == 0


def test_claim_four_minutes_after_previous_mark(fixed_now):
    history = [fixed_now - timedelta(minutes=4)]

    result = PatternCheck().analyze_patterns(history, now=fixed_now, claim_time=fixed_now)

    assert result.penalty == 25
    assert result.codes == [ReasonCode.RAPID_SUCCESSION]


def test_claim_six_minutes_after_previous_mark(fixed_now):
    history = [fixed_now - timedelta(minutes=6)]

    assert PatternCheck().analyze_patterns(history, now=fixed_now, claim_time=fixed_now).penalty == 0


def test_rapid_succession_counts_once(fixed_now):
    history = [fixed_now - timedelta(days=1, minutes=m) for m in (0, 1, 2, 3)]

    result = PatternCheck().analyze_patterns(history, now=fixed_now, claim_time=fixed_now)

    assert result.penalty == 25


def test_rapid_succession_ignores_marks_older_than_a_week(fixed_now):
    history = [fixed_now - timedelta(days=8), fixed_now - timedelta(days=8, minutes=2)]

    assert PatternCheck().analyze_patterns(history, now=fixed_now, claim_time=fixed_now).penalty == 0


def test_clustering_needs_ten_records(fixed_now):
    base = fixed_now - timedelta(days=10)
    check = PatternCheck()

    nine = [base - timedelta(minutes=3 * i) for i in range(9)]
    assert check.analyze_patterns(nine, now=fixed_now, claim_time=fixed_now).penalty == 0

    ten = [base - timedelta(minutes=3 * i) for i in range(10)]
    result = check.analyze_patterns(ten, now=fixed_now, claim_time=fixed_now)
    assert result.penalty == 30
    assert result.codes == [ReasonCode.CLUSTERING]


def test_spread_out_history_does_not_cluster(fixed_now):
    history = [fixed_now - timedelta(days=i + 1) for i in range(20)]

    assert PatternCheck().analyze_patterns(history, now=fixed_now, claim_time=fixed_now).penalty == 0


def test_rapid_and_clustering_can_fire_together(fixed_now):
    history = [fixed_now - timedelta(hours=1, minutes=2 * i) for i in range(12)]

    result = PatternCheck().analyze_patterns(history, now=fixed_now, claim_time=fixed_now)

    assert result.codes == [ReasonCode.RAPID_SUCCESSION, ReasonCode.CLUSTERING]
    assert result.penalty == 55
