"""
Blood pressure statistics over a rolling window.

Works on any objects exposing `systolic`, `diastolic`, `pulse_rate` and
`timestamp` attributes (model instances or plain records). Inputs are never
modified; each call builds a fresh result.
"""
import logging
from collections import defaultdict
from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from .classification import classify
from .time_utils import as_utc, now_utc, day_bucket_key, week_bucket_key

logger = logging.getLogger(__name__)

PERIOD_DAYS = {
    '7d': 7,
    '30d': 30,
    '90d': 90,
    '1y': 365,
}
DEFAULT_PERIOD = '30d'

# Periods long enough to chart week by week; everything else is daily
WEEKLY_PERIODS = ('90d', '1y')

TREND_RECENT_POINTS = 5


def round_half_up(value) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _mean(values):
    if not values:
        return None
    return round_half_up(sum(values) / len(values))


def resolve_window(period: str, now=None):
    """Return the (start, end) UTC instants for a period label.

    Unknown labels fall back to the default 30 day window.
    """
    end = as_utc(now) if now is not None else now_utc()
    days = PERIOD_DAYS.get(period)
    if days is None:
        logger.debug('Unknown statistics period %r, using %s', period, DEFAULT_PERIOD)
        days = PERIOD_DAYS[DEFAULT_PERIOD]
    return end - timedelta(days=days), end


def filter_window(readings, start, end):
    """Readings whose timestamp lies in [start, end], oldest first."""
    selected = [
        r for r in readings
        if r.timestamp is not None and start <= as_utc(r.timestamp) <= end
    ]
    return sorted(selected, key=lambda r: as_utc(r.timestamp))


def average_bp(readings):
    """Mean systolic/diastolic/pulse; pulse is None when no reading has one."""
    if not readings:
        return None
    pulses = [r.pulse_rate for r in readings if r.pulse_rate is not None]
    return {
        'systolic': _mean([r.systolic for r in readings]),
        'diastolic': _mean([r.diastolic for r in readings]),
        'pulse': _mean(pulses),
    }


def category_distribution(readings) -> dict:
    """Map each category present to its count and whole-number percentage."""
    total = len(readings)
    counts = defaultdict(int)
    for reading in readings:
        counts[classify(reading.systolic, reading.diastolic)] += 1

    return {
        category: {
            'count': count,
            'percentage': round_half_up(count / total * 100),
        }
        for category, count in counts.items()
    }


def bucket_trends(readings, bucket_key=day_bucket_key) -> list:
    """Per-bucket averages, sorted by bucket date."""
    buckets = defaultdict(lambda: {'systolic': [], 'diastolic': [], 'pulse': []})
    for reading in readings:
        bucket = buckets[bucket_key(reading.timestamp)]
        bucket['systolic'].append(reading.systolic)
        bucket['diastolic'].append(reading.diastolic)
        if reading.pulse_rate is not None:
            bucket['pulse'].append(reading.pulse_rate)

    trends = []
    for date in sorted(buckets):
        values = buckets[date]
        trends.append({
            'date': date,
            'avgSystolic': _mean(values['systolic']),
            'avgDiastolic': _mean(values['diastolic']),
            'avgPulse': _mean(values['pulse']),
            'readingCount': len(values['systolic']),
        })
    return trends


def trend_direction(series) -> float:
    """
    Compare the mean of the latest points with the mean of the earlier ones.

    Positive means rising, negative falling. Series with fewer than two
    points are neutral (0.0).
    """
    values = [v for v in series if v is not None]
    if len(values) < 2:
        return 0.0

    split = max(len(values) - TREND_RECENT_POINTS, 1)
    recent = values[split:]
    earlier = values[:split]
    return sum(recent) / len(recent) - sum(earlier) / len(earlier)


def trend_label(delta: float) -> str:
    if delta > 0:
        return 'rising'
    if delta < 0:
        return 'falling'
    return 'stable'


def summarize_trends(trends) -> dict:
    """Direction of each averaged metric across a trend series."""
    summary = {}
    for metric, key in (('systolic', 'avgSystolic'),
                        ('diastolic', 'avgDiastolic'),
                        ('pulse', 'avgPulse')):
        delta = trend_direction([t[key] for t in trends])
        summary[metric] = {'delta': round(delta, 1), 'direction': trend_label(delta)}
    return summary


def aggregate(readings, period: str = DEFAULT_PERIOD, now=None) -> dict:
    """
    Build the statistics payload for a user's readings over a period.

    Args:
        readings: Readings for one user; may include readings outside the window.
        period: One of '7d', '30d', '90d', '1y'. Anything else uses 30 days.
        now: End of the window (defaults to the current UTC instant).

    Returns:
        dict with totalReadings, averageBP, categoryDistribution, trends,
        trendDirection, period and dateRange.
    """
    start, end = resolve_window(period, now)
    date_range = {
        'startDate': start.isoformat().replace('+00:00', 'Z'),
        'endDate': end.isoformat().replace('+00:00', 'Z'),
    }

    selected = filter_window(readings, start, end)
    if not selected:
        return {
            'totalReadings': 0,
            'averageBP': None,
            'categoryDistribution': {},
            'trends': [],
            'trendDirection': summarize_trends([]),
            'period': period,
            'dateRange': date_range,
        }

    bucket_key = week_bucket_key if period in WEEKLY_PERIODS else day_bucket_key
    trends = bucket_trends(selected, bucket_key)

    return {
        'totalReadings': len(selected),
        'averageBP': average_bp(selected),
        'categoryDistribution': category_distribution(selected),
        'trends': trends,
        'trendDirection': summarize_trends(trends),
        'period': period,
        'dateRange': date_range,
    }
