from hourcast.domain import InsightKind
from hourcast.insight_engine import (
    build_insights,
    compute_recommendations,
    detect_anomalies,
    round_half_away,
    score_hour,
)
from tests.helpers import make_records


def _messages(items):
    return [i.message for i in items]


def test_score_components():
    records = make_records(
        ["2024-01-01T10:00", "2024-01-01T22:00", "2024-01-01T12:00", "2024-01-01T18:00"],
        [70, 50, 92, 34],
        [0, 0, 61, 95],
    )
    assert score_hour(records[0]) == 3 + 2 + 1.5
    assert score_hour(records[1]) == 3 + 1
    assert score_hour(records[2]) == 1 - 2 + 1.5
    assert score_hour(records[3]) == -3 - 2 + 1.5


def test_temperature_weight_edges():
    records = make_records(
        ["2024-01-01T02:00"] * 6,
        [55, 82, 45, 54.99, 90, 35],
        [0] * 6,
    )
    assert [score_hour(r) - 3 for r in records] == [2, 2, 1, 1, 0, 0]


def test_daylight_window_is_inclusive():
    records = make_records(
        ["2024-01-01T07:00", "2024-01-01T08:00", "2024-01-01T18:00", "2024-01-01T19:00"],
        [85] * 4,
        [0] * 4,
    )
    assert [score_hour(r) for r in records] == [3, 4.5, 4.5, 3]


def test_recommendations_ranked_descending_and_filtered():
    # scores: 4, 2.5, -1, 3
    records = make_records(
        ["2024-01-01T05:00", "2024-01-01T10:00", "2024-01-01T21:00", "2024-01-01T22:00"],
        [50, 85, 60, 86],
        [0, 61, 95, 0],
    )
    recs = compute_recommendations(records)
    assert [r.score for r in recs] == [4, 3, 2.5]
    assert _messages(recs) == [
        "Task window 05:00 • Good Conditions • 50°",
        "Task window 22:00 • Good Conditions • 86°",
        "Task window 10:00 • Bad Conditions • 85°",
    ]
    assert all(r.kind == InsightKind.RECOMMENDATION for r in recs)


def test_recommendation_ties_keep_chronological_order():
    records = make_records(
        ["2024-01-01T10:00", "2024-01-01T11:00", "2024-01-01T12:00"],
        [70, 85, 70],
        [0, 0, 1],
    )
    recs = compute_recommendations(records)
    assert _messages(recs)[0].startswith("Task window 10:00")
    assert _messages(recs)[1].startswith("Task window 12:00")
    assert _messages(recs)[2].startswith("Task window 11:00")


def test_recommendations_capped_at_four_and_exclude_score_one():
    times = [f"2024-01-01T{h:02d}:00" for h in range(9, 15)]
    records = make_records(times, [70] * 6, [0] * 6)
    assert len(compute_recommendations(records)) == 4

    # bad tier, mild-cold temp, night: 1 + 0 + 0 == 1, not > 1
    night = make_records(["2024-01-01T02:00"], [40], [61])
    assert compute_recommendations(night) == []


def test_swing_anomaly_on_second_hour():
    records = make_records(["2024-01-01T09:00", "2024-01-01T10:00"], [64, 42], [0, 61])
    anomalies = detect_anomalies(records)
    assert _messages(anomalies) == ["10:00 swing • ~22° jump"]
    assert anomalies[0].score is None
    assert anomalies[0].kind == InsightKind.ANOMALY


def test_swing_threshold_is_inclusive():
    records = make_records(
        ["2024-01-01T09:00", "2024-01-01T10:00", "2024-01-01T11:00"], [60, 75, 60.1], [0, 0, 0]
    )
    assert _messages(detect_anomalies(records)) == ["10:00 swing • ~15° jump"]


def test_thunderstorm_hour_emits_two_messages():
    records = make_records(["2024-01-01T14:00"], [60], [95])
    assert _messages(detect_anomalies(records)) == [
        "14:00 alert • Unsuitable Conditions ⚡",
        "14:00 alert • Thunderstorm risk",
    ]


def test_heat_and_freeze_messages():
    records = make_records(["2024-01-01T13:00", "2024-01-02T13:30"], [95.5, 20], [0, 0])
    assert _messages(detect_anomalies(records)) == [
        "13:00 alert • Unsuitable Conditions 🔥",
        "13:00 heat • 96°",
        "13:30 alert • Unsuitable Conditions 🥶",
        "13:30 swing • ~76° jump",
        "13:30 freeze • 20°",
    ]


def test_duplicate_messages_collapse():
    records = make_records(
        ["2024-01-01T14:00", "2024-01-01T15:00", "2024-01-02T14:00"],
        [20, 25, 20],
        [0, 0, 0],
    )
    assert _messages(detect_anomalies(records)) == [
        "14:00 alert • Unsuitable Conditions 🥶",
        "14:00 freeze • 20°",
        "15:00 alert • Unsuitable Conditions 🥶",
        "15:00 freeze • 25°",
    ]


def test_anomalies_truncated_to_six():
    times = [f"2024-01-01T{h:02d}:00" for h in range(1, 5)]
    records = make_records(times, [60] * 4, [95] * 4)
    messages = _messages(detect_anomalies(records))
    assert len(messages) == 6
    assert "04:00 alert • Unsuitable Conditions ⚡" not in messages
    assert messages[-1] == "03:00 alert • Thunderstorm risk"


def test_build_insights_on_empty_input():
    assert build_insights([]) == ([], [])


def test_round_half_away():
    assert round_half_away(2.5) == 3
    assert round_half_away(-2.5) == -3
    assert round_half_away(21.4) == 21
    assert round_half_away(0) == 0
