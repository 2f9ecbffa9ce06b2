# src/modules/contest/services/duration_parser.py

import re
from typing import Optional

SECOND_MS = 1000
MINUTE_MS = SECOND_MS * 60
HOUR_MS = MINUTE_MS * 60
DAY_MS = HOUR_MS * 24
WEEK_MS = DAY_MS * 7
YEAR_MS = DAY_MS * 365.25

MAX_INPUT_LENGTH = 100

class DurationParser:
    """
    解析 "10m"、"1.5h"、"2 days" 这类时长字符串，结果以毫秒表示。
    不带单位的数字按毫秒处理。
    """

    UNIT_PATTERN = re.compile(
        r"^(?P<value>-?(?:\d+)?\.?\d+) *"
        r"(?P<unit>milliseconds?|msecs?|ms|seconds?|secs?|s|minutes?|mins?|m|hours?|hrs?|h|days?|d|weeks?|w|years?|yrs?|y)?$",
        re.IGNORECASE
    )

    UNIT_MS = {
        'millisecond': 1, 'milliseconds': 1, 'msec': 1, 'msecs': 1, 'ms': 1,
        'second': SECOND_MS, 'seconds': SECOND_MS, 'sec': SECOND_MS, 'secs': SECOND_MS, 's': SECOND_MS,
        'minute': MINUTE_MS, 'minutes': MINUTE_MS, 'min': MINUTE_MS, 'mins': MINUTE_MS, 'm': MINUTE_MS,
        'hour': HOUR_MS, 'hours': HOUR_MS, 'hr': HOUR_MS, 'hrs': HOUR_MS, 'h': HOUR_MS,
        'day': DAY_MS, 'days': DAY_MS, 'd': DAY_MS,
        'week': WEEK_MS, 'weeks': WEEK_MS, 'w': WEEK_MS,
        'year': YEAR_MS, 'years': YEAR_MS, 'yr': YEAR_MS, 'yrs': YEAR_MS, 'y': YEAR_MS,
    }

    def parse(self, text: Optional[str]) -> Optional[float]:
        """
        Returns:
            Optional[float]: 毫秒数；无法解析、为零或为负时返回 None。
        """
        if not text:
            return None

        text = text.strip()
        if not text or len(text) > MAX_INPUT_LENGTH:
            return None

        match = self.UNIT_PATTERN.match(text)
        if not match:
            return None

        value = float(match.group('value'))
        unit = (match.group('unit') or 'ms').lower()
        duration_ms = value * self.UNIT_MS[unit]

        if duration_ms <= 0:
            return None
        return duration_ms

duration_parser = DurationParser()
