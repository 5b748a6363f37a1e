"""Review analytics: card-state histogram, weekly activity, activity heatmap."""

from .review_stats import (
    HEATMAP_WINDOW_DAYS,
    WEEKLY_WINDOW_DAYS,
    CardStateHistogram,
    DayBucket,
    ReferenceDay,
    ReviewAnalytics,
    activity_heatmap,
    bucket_by_day,
    build_review_analytics,
    card_state_histogram,
    due_count,
    has_activity,
    reconcile_card_states,
    resolve_timezone,
    review_counts,
    today_review_count,
    weekly_activity,
    window_start,
)

__all__ = [
    "HEATMAP_WINDOW_DAYS",
    "WEEKLY_WINDOW_DAYS",
    "CardStateHistogram",
    "DayBucket",
    "ReferenceDay",
    "ReviewAnalytics",
    "activity_heatmap",
    "bucket_by_day",
    "build_review_analytics",
    "card_state_histogram",
    "due_count",
    "has_activity",
    "reconcile_card_states",
    "resolve_timezone",
    "review_counts",
    "today_review_count",
    "weekly_activity",
    "window_start",
]
