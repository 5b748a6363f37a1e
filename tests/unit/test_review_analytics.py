"""
Unit tests for review analytics.

All tests pin the reference instant and zone so bucketing is reproducible.
"""

from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from learnpath.analytics.review_stats import (
    DAY_LABELS,
    CardStateHistogram,
    ReferenceDay,
    activity_heatmap,
    bucket_by_day,
    build_review_analytics,
    card_state_histogram,
    due_count,
    has_activity,
    reconcile_card_states,
    review_counts,
    today_review_count,
    weekly_activity,
    window_start,
)
from learnpath.core.types import CardState, CardStateRecord, ReviewLogEntry

# Wednesday afternoon
NOW = datetime(2025, 3, 12, 15, 0, tzinfo=UTC)


@pytest.fixture
def reference():
    return ReferenceDay.capture(ZoneInfo("UTC"), now=NOW)


def log_at(instant, card_id="c1"):
    return ReviewLogEntry(card_id=card_id, timestamp=instant)


def states(**counts):
    """states(review=2, learning=1) -> [CardStateRecord, ...] with unique ids."""
    records = []
    for name, count in counts.items():
        for idx in range(count):
            records.append(CardStateRecord(card_id=f"{name}-{idx}", state=CardState[name.upper()]))
    return records


class TestReferenceDay:
    def test_naive_now_is_read_in_zone(self):
        ref = ReferenceDay.capture(ZoneInfo("Europe/Amsterdam"), now=datetime(2025, 3, 12, 0, 30))

        assert ref.today == datetime(2025, 3, 12).date()
        assert ref.now.utcoffset() == timedelta(hours=1)

    def test_local_date_uses_zone(self):
        ref = ReferenceDay.capture(ZoneInfo("Europe/Amsterdam"), now=datetime(2025, 3, 12, 12, 0))

        # 23:30 UTC on the 11th is 00:30 on the 12th in Amsterdam
        assert ref.day_offset(datetime(2025, 3, 11, 23, 30, tzinfo=UTC)) == 0
        assert ref.day_offset(datetime(2025, 3, 11, 22, 30, tzinfo=UTC)) == 1

    def test_window_start(self, reference):
        assert window_start(7, reference) == datetime(2025, 3, 6, tzinfo=ZoneInfo("UTC"))
        assert window_start(1, reference) == datetime(2025, 3, 12, tzinfo=ZoneInfo("UTC"))

    def test_window_start_rejects_empty_window(self, reference):
        with pytest.raises(ValueError):
            window_start(0, reference)


class TestCardStateHistogram:
    def test_untracked_cards_fold_into_new(self):
        histogram = card_state_histogram(states(review=40, learning=20), total_content_cards=100)

        assert histogram == CardStateHistogram(new=40, learning=20, review=40, relearning=0)
        assert histogram.total == 100

    def test_tracked_new_cards_add_to_untracked(self):
        histogram = card_state_histogram(states(new=5, relearning=1), total_content_cards=10)

        assert histogram.to_dict() == {"new": 9, "learning": 0, "review": 0, "relearning": 1}

    def test_no_cards(self):
        assert card_state_histogram([], total_content_cards=0).total == 0

    def test_orphans_and_duplicates_reconciled(self):
        records = [
            CardStateRecord(card_id="a", state=CardState.LEARNING),
            CardStateRecord(card_id="a", state=CardState.REVIEW),
            CardStateRecord(card_id="ghost", state=CardState.REVIEW),
            CardStateRecord(card_id="b", state=CardState.RELEARNING),
        ]

        tracked, issues = reconcile_card_states(records, known_card_ids={"a", "b", "c"})
        histogram = card_state_histogram(tracked, total_content_cards=3)

        assert {r.card_id: r.state for r in tracked} == {"a": CardState.REVIEW, "b": CardState.RELEARNING}
        assert sorted(i.kind for i in issues) == ["duplicate_card_state", "orphan_card_state"]
        assert histogram == CardStateHistogram(new=1, learning=0, review=1, relearning=1)

    def test_duplicate_card_counted_once(self):
        records = [
            CardStateRecord(card_id="a", state=CardState.LEARNING),
            CardStateRecord(card_id="a", state=CardState.REVIEW),
        ]

        histogram = card_state_histogram(records, total_content_cards=2)

        assert histogram == CardStateHistogram(new=1, learning=0, review=1, relearning=0)

    def test_reconcile_without_known_ids_keeps_everything(self):
        tracked, issues = reconcile_card_states(states(review=2))

        assert len(tracked) == 2
        assert issues == []


class TestActivitySeries:
    def test_today_and_eight_days_ago(self, reference):
        logs = [log_at(NOW - timedelta(hours=h)) for h in (1, 3, 5)]
        logs += [log_at(NOW - timedelta(days=8)) for _ in range(2)]

        weekly = weekly_activity(logs, reference)
        heatmap = activity_heatmap(logs, reference)

        assert len(weekly) == 7
        assert len(heatmap) == 28
        assert sum(b.count for b in weekly) == 3
        assert sum(b.count for b in heatmap) == 5
        assert weekly[-1].count == 3
        assert heatmap[-9].count == 2

    def test_buckets_oldest_first_at_local_midnight(self, reference):
        weekly = weekly_activity([], reference)

        assert weekly[0].date == datetime(2025, 3, 6, tzinfo=ZoneInfo("UTC"))
        assert weekly[-1].date == datetime(2025, 3, 12, tzinfo=ZoneInfo("UTC"))
        assert [b.day_label for b in weekly] == ["Thu", "Fri", "Sat", "Sun", "Mon", "Tue", "Wed"]

    def test_earlier_today_counts_as_today(self, reference):
        # 00:05 is more than 14 hours before NOW but still the same calendar day
        logs = [log_at(datetime(2025, 3, 12, 0, 5, tzinfo=UTC))]

        assert weekly_activity(logs, reference)[-1].count == 1
        assert today_review_count(logs, reference) == 1

    def test_window_edges(self, reference):
        six_days_ago = datetime(2025, 3, 6, 0, 0, tzinfo=UTC)
        seven_days_ago = datetime(2025, 3, 5, 23, 59, tzinfo=UTC)

        weekly = weekly_activity([log_at(six_days_ago), log_at(seven_days_ago)], reference)

        assert weekly[0].count == 1
        assert sum(b.count for b in weekly) == 1

    def test_future_entries_excluded(self, reference):
        logs = [log_at(NOW + timedelta(days=1)), log_at(NOW + timedelta(days=30))]

        assert not has_activity(weekly_activity(logs, reference))
        assert not has_activity(activity_heatmap(logs, reference))

    def test_empty_window(self, reference):
        heatmap = activity_heatmap([], reference)

        assert [b.count for b in heatmap] == [0] * 28
        assert has_activity(heatmap) is False

    def test_weekly_sum_matches_offsets(self, reference):
        logs = [log_at(NOW - timedelta(hours=11 * n)) for n in range(40)]

        weekly = weekly_activity(logs, reference)

        expected = sum(1 for entry in logs if 0 <= reference.day_offset(entry.timestamp) < 7)
        assert sum(b.count for b in weekly) == expected

    def test_naive_timestamps_read_in_zone(self):
        ref = ReferenceDay.capture(ZoneInfo("America/New_York"), now=datetime(2025, 3, 12, 9, 0))

        series = bucket_by_day([log_at(datetime(2025, 3, 11, 23, 0))], 2, ref)

        assert [b.count for b in series] == [1, 0]

    def test_bucket_by_day_rejects_empty_window(self, reference):
        with pytest.raises(ValueError):
            bucket_by_day([], 0, reference)

    def test_day_labels_monday_first(self):
        assert DAY_LABELS[0] == "Mon"
        assert DAY_LABELS[-1] == "Sun"


class TestDueCount:
    def test_due_at_or_before_now(self, reference):
        records = [
            CardStateRecord(card_id="a", state=CardState.REVIEW, due=NOW - timedelta(days=1)),
            CardStateRecord(card_id="b", state=CardState.LEARNING, due=NOW),
            CardStateRecord(card_id="c", state=CardState.RELEARNING, due=NOW + timedelta(minutes=1)),
        ]

        assert due_count(records, reference) == 2

    def test_new_cards_never_due(self, reference):
        records = [
            CardStateRecord(card_id="a", state=CardState.NEW, due=NOW - timedelta(days=3)),
            CardStateRecord(card_id="b", state=CardState.REVIEW, due=None),
        ]

        assert due_count(records, reference) == 0

    def test_duplicate_card_counted_once(self, reference):
        records = [
            CardStateRecord(card_id="a", state=CardState.REVIEW, due=NOW - timedelta(days=1)),
            CardStateRecord(card_id="a", state=CardState.REVIEW, due=NOW - timedelta(hours=1)),
        ]

        assert due_count(records, reference) == 1

    def test_naive_due_read_in_zone(self):
        ref = ReferenceDay.capture(ZoneInfo("America/New_York"), now=datetime(2025, 3, 12, 9, 0))
        record = CardStateRecord(card_id="a", state=CardState.REVIEW, due=datetime(2025, 3, 12, 10, 0))

        assert due_count([record], ref) == 0


class TestBuildReviewAnalytics:
    def test_known_card_ids_required(self, reference):
        with pytest.raises(TypeError):
            build_review_analytics([], [], 0, reference=reference)

    def test_orphan_state_never_inflates_total(self, reference):
        records = [
            CardStateRecord(card_id="a", state=CardState.REVIEW),
            CardStateRecord(card_id="ghost", state=CardState.REVIEW),
        ]

        analytics = build_review_analytics(records, [], 1, {"a"}, reference=reference)

        assert analytics.histogram == CardStateHistogram(new=0, learning=0, review=1, relearning=0)
        assert analytics.histogram.total == 1

    def test_total_reviews_is_all_time(self, reference):
        logs = [log_at(NOW - timedelta(hours=1))]

        analytics = build_review_analytics([], logs, 0, set(), reference=reference, total_reviews=3)

        assert analytics.total_reviews == 3
        assert analytics.heatmap_total == 1

    def test_due_count_skips_orphans(self, reference):
        records = [
            CardStateRecord(card_id="a", state=CardState.REVIEW, due=NOW - timedelta(days=1)),
            CardStateRecord(card_id="ghost", state=CardState.REVIEW, due=NOW - timedelta(days=1)),
        ]

        analytics = build_review_analytics(records, [], 1, {"a"}, reference=reference)

        assert analytics.due_count == 1

    def test_single_reference_for_every_series(self, reference):
        logs = [log_at(NOW - timedelta(hours=1)), log_at(NOW - timedelta(days=10))]

        analytics = build_review_analytics(
            states(review=1),
            logs,
            total_content_cards=4,
            known_card_ids={"review-0", "x", "y", "z"},
            reference=reference,
        )

        assert analytics.reference is reference
        assert analytics.weekly[-1].date == analytics.heatmap[-1].date
        assert analytics.weekly_total == 1
        assert analytics.heatmap_total == 2
        assert analytics.today_count == 1
        assert analytics.total_reviews == 2
        assert analytics.histogram.to_dict() == {"new": 3, "learning": 0, "review": 1, "relearning": 0}

    def test_custom_window_lengths(self, reference):
        analytics = build_review_analytics([], [], 0, set(), reference=reference, weekly_days=3, heatmap_days=14)

        assert len(analytics.weekly) == 3
        assert len(analytics.heatmap) == 14

    def test_issues_surface(self, reference):
        analytics = build_review_analytics(
            [CardStateRecord(card_id="ghost", state=CardState.REVIEW)],
            [],
            total_content_cards=2,
            known_card_ids={"a", "b"},
            reference=reference,
        )

        assert analytics.histogram.total == 2
        assert analytics.issues[0].record_id == "ghost"

    def test_review_counts(self, reference):
        logs = [log_at(NOW), log_at(NOW - timedelta(days=2))]

        assert review_counts(logs, reference) == (1, 2)
