# stats.py
"""首页统计: 状态分布、掌握曲线、月度进度、活跃热力图

mod 是毫秒时间戳，日期一律按 UTC 计算。
"""
import logging
from collections import Counter
from datetime import date, datetime, timedelta, timezone

from models import KNOWN_STATUSES

logger = logging.getLogger(__name__)


def status_counts(words):
    counter = Counter(w.knownStatus for w in words)
    counts = {'total': len(words)}
    for status in KNOWN_STATUSES:
        counts[status] = counter.get(status, 0)
    return counts


def _mod_date(word):
    # mod 由客户端提供，超出范围或不是数字时跳过这个单词
    try:
        return datetime.fromtimestamp(word.mod / 1000, tz=timezone.utc).date()
    except (TypeError, ValueError, OverflowError, OSError):
        logger.warning('单词 %r 的 mod 无法转换为日期: %r', word.dictForm, word.mod)
        return None


def _known_dates(words):
    """已掌握且有合法修改时间的单词，按日期排序"""
    dates = (_mod_date(w) for w in words if w.knownStatus == 'KNOWN' and w.mod)
    return sorted(d for d in dates if d is not None)


def known_timeline(words, max_points=50):
    daily = Counter(_known_dates(words))

    timeline = []
    total = 0
    for day in sorted(daily):
        total += daily[day]
        timeline.append({'date': day.isoformat(), 'count': total})

    # 点太多时抽样，保留首尾
    step = max(1, len(timeline) // max_points)
    return [
        point for i, point in enumerate(timeline)
        if i == 0 or i == len(timeline) - 1 or i % step == 0
    ]


def monthly_progress(words):
    monthly = Counter(d.strftime('%Y-%m') for d in _known_dates(words))
    return [{'month': month, 'count': monthly[month]} for month in sorted(monthly)]


def one_year_before(day):
    try:
        return day.replace(year=day.year - 1)
    except ValueError:
        # 2 月 29 日往前一年没有对应日期
        return day.replace(year=day.year - 1, day=28)


def activity_heatmap(words, today=None, days=None):
    """从一年前的同一天到 today（含首尾）每天一个格子；指定 days 时往前推 days 天"""
    if today is None:
        today = datetime.now(timezone.utc).date()
    daily = Counter(_known_dates(words))

    start = one_year_before(today) if days is None else today - timedelta(days=days)

    heatmap = []
    current = start
    while current <= today:
        heatmap.append({'date': current.isoformat(), 'count': daily.get(current, 0)})
        current += timedelta(days=1)
    return heatmap


def build_summary(word_list):
    """不依赖当天日期的统计，可以缓存到下一次同步"""
    words = list(word_list)
    return {
        'counts': status_counts(words),
        'timeline': known_timeline(words),
        'monthly': monthly_progress(words),
    }


def build_dashboard(word_list, today=None):
    return {
        **build_summary(word_list),
        'heatmap': activity_heatmap(list(word_list), today=today),
    }


def parse_day(value):
    """?today=YYYY-MM-DD，方便固定热力图的结束日期"""
    if not value:
        return None
    return date.fromisoformat(value)
