"""Ordering and aggregation of wrong word records."""

from collections import defaultdict
from datetime import datetime, timedelta

from .config import DEFAULT_REVIEW_QUEUE_LIMIT, HIGH_PRIORITY, RECENT_ERROR_DAYS
from .models import WrongWord
from .utils import utc_now, round2

SORT_OPTIONS = ['urgency', 'recent', 'priority', 'error_count', 'alphabetical']


def rank_by_urgency(records: list[WrongWord], limit: int = DEFAULT_REVIEW_QUEUE_LIMIT,
                    now: datetime = None) -> list[WrongWord]:
    """Unresolved records, most urgent first.

    Ties go to the most recent mistake. Scores are computed at call time.
    """
    now = now or utc_now()
    unresolved = [record for record in records if not record.is_resolved]
    # Stable sorts: secondary key first
    unresolved.sort(key=lambda record: record.last_wrong_date, reverse=True)
    unresolved.sort(key=lambda record: record.urgency_score(now), reverse=True)
    return unresolved[:limit]


def review_queue_entry(record: WrongWord, now: datetime = None) -> dict:
    return record.review_queue_entry(now)


def sort_wrong_words(records: list[WrongWord], sort_by: str = 'urgency',
                     now: datetime = None) -> list[WrongWord]:
    """Sort records for listing. Unknown sort keys fall back to 'recent'."""
    now = now or utc_now()
    ordered = sorted(records, key=lambda record: record.last_wrong_date, reverse=True)
    if sort_by == 'urgency':
        ordered.sort(key=lambda record: record.urgency_score(now), reverse=True)
    elif sort_by == 'priority':
        ordered.sort(key=lambda record: record.review_priority, reverse=True)
    elif sort_by == 'error_count':
        ordered.sort(key=lambda record: record.error_count, reverse=True)
    elif sort_by == 'alphabetical':
        ordered.sort(key=lambda record: record.word.lower())
    return ordered


def high_priority(records: list[WrongWord], min_priority: int = HIGH_PRIORITY,
                  limit: int = 20) -> list[WrongWord]:
    """Unresolved records at or above min_priority, highest priority then most recent."""
    selected = [r for r in records if not r.is_resolved and r.review_priority >= min_priority]
    selected.sort(key=lambda record: record.last_wrong_date, reverse=True)
    selected.sort(key=lambda record: record.review_priority, reverse=True)
    return selected[:limit]


def _average_priority(records: list[WrongWord]) -> float:
    if not records:
        return 0
    return round2(sum(record.review_priority for record in records) / len(records))


def summarize(records: list[WrongWord], now: datetime = None) -> dict:
    """Totals over the unresolved records."""
    now = now or utc_now()
    unresolved = [record for record in records if not record.is_resolved]
    recent_cutoff = now - timedelta(days=RECENT_ERROR_DAYS)
    return {
        'total_wrong_words': len(unresolved),
        'high_priority_words': sum(1 for r in unresolved if r.review_priority >= HIGH_PRIORITY),
        'total_errors': sum(record.error_count for record in unresolved),
        'average_priority': _average_priority(unresolved),
        'recent_errors': sum(1 for r in unresolved if r.last_wrong_date >= recent_cutoff)
    }


def analytics(records: list[WrongWord], timeframe_days: int = 30, now: datetime = None) -> dict:
    """Overall, recent activity, per dictionary and priority distribution figures."""
    now = now or utc_now()
    unresolved = [record for record in records if not record.is_resolved]
    start = now - timedelta(days=timeframe_days)
    recent = [record for record in records if record.last_wrong_date >= start]

    by_dictionary = defaultdict(list)
    for record in unresolved:
        by_dictionary[record.dictionary_id].append(record)
    dictionary_rows = [
        {
            'dictionary_id': dictionary_id,
            'wrong_words_count': len(group),
            'total_errors': sum(record.error_count for record in group),
            'average_priority': _average_priority(group)
        }
        for dictionary_id, group in by_dictionary.items()
    ]
    dictionary_rows.sort(key=lambda row: row['wrong_words_count'], reverse=True)

    distribution = defaultdict(int)
    for record in unresolved:
        distribution[record.review_priority] += 1

    return {
        'timeframe_days': timeframe_days,
        'overall': {
            'total_wrong_words': len(records),
            'resolved_words': len(records) - len(unresolved),
            'unresolved_words': len(unresolved),
            'total_errors': sum(record.error_count for record in records),
            'average_priority': _average_priority(records)
        },
        'recent_activity': {
            'recent_wrong_words': len(recent),
            'recent_errors': sum(record.error_count for record in recent)
        },
        'by_dictionary': dictionary_rows,
        'priority_distribution': [
            {'priority': priority, 'count': distribution[priority]}
            for priority in sorted(distribution)
        ]
    }
