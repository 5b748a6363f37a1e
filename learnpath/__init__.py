"""
learnpath: lesson progression and review analytics for a self-paced course.

Derives effective lesson status (sequential unlock), module mastery, and
review activity projections from progress, scheduler and review-log
snapshots.
"""

__version__ = "0.3.0"
