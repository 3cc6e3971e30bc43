import unittest
from datetime import datetime, timezone

from tootmetrics.analytics.timeframes import DEFAULT_TIMEFRAME, TIMEFRAMES, resolve_timeframe
from tootmetrics.utils import TimezoneResolutionError, day_instant, local_today


def _utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


# Wednesday
REF = _utc(2024, 5, 15, 12, 0)


class ResolveTimeframeUtcTests(unittest.TestCase):
    def _bounds(self, token):
        resolved = resolve_timeframe("UTC", token, REF)
        return resolved.date_from, resolved.date_to

    def test_rolling_windows(self):
        self.assertEqual(self._bounds("last30days"), (_utc(2024, 4, 15), _utc(2024, 5, 15)))
        self.assertEqual(self._bounds("last7days"), (_utc(2024, 5, 8), _utc(2024, 5, 15)))

    def test_current_periods_end_today(self):
        self.assertEqual(self._bounds("thisweek"), (_utc(2024, 5, 13), _utc(2024, 5, 15)))
        self.assertEqual(self._bounds("thismonth"), (_utc(2024, 5, 1), _utc(2024, 5, 15)))
        self.assertEqual(self._bounds("thisyear"), (_utc(2024, 1, 1), _utc(2024, 5, 15)))

    def test_previous_periods_end_before_current_start(self):
        self.assertEqual(self._bounds("lastweek"), (_utc(2024, 5, 6), _utc(2024, 5, 12)))
        self.assertEqual(self._bounds("lastmonth"), (_utc(2024, 4, 1), _utc(2024, 4, 30)))
        self.assertEqual(self._bounds("lastyear"), (_utc(2023, 1, 1), _utc(2023, 12, 31)))

    def test_unknown_token_falls_back(self):
        for token in ("fortnight", "", None):
            resolved = resolve_timeframe("UTC", token, REF)
            self.assertEqual(resolved.timeframe, DEFAULT_TIMEFRAME)
            self.assertEqual((resolved.date_from, resolved.date_to), self._bounds("last30days"))

    def test_token_is_normalized(self):
        self.assertEqual(resolve_timeframe("UTC", " ThisWeek ", REF).timeframe, "thisweek")

    def test_all_tokens_resolve(self):
        for token in TIMEFRAMES:
            resolved = resolve_timeframe("UTC", token, REF)
            self.assertEqual(resolved.timeframe, token)
            self.assertLessEqual(resolved.date_from, resolved.date_to)


class ResolveTimeframeZonedTests(unittest.TestCase):
    def test_thisweek_ends_on_local_today(self):
        for tz in ("Europe/Berlin", "America/New_York", "Pacific/Kiritimati", "Pacific/Pago_Pago"):
            resolved = resolve_timeframe(tz, "thisweek", REF)
            self.assertEqual(resolved.date_to, day_instant(tz, 0, REF))
            self.assertEqual(local_today(tz, resolved.date_to), local_today(tz, REF))

    def test_last_month_across_dst_change(self):
        ref = _utc(2024, 3, 31, 10, 0)
        resolved = resolve_timeframe("Europe/Berlin", "lastmonth", ref)
        self.assertEqual(resolved.date_from, _utc(2024, 1, 31, 23, 0))
        self.assertEqual(resolved.date_to, _utc(2024, 2, 28, 23, 0))
        resolved = resolve_timeframe("Europe/Berlin", "thismonth", ref)
        self.assertEqual(resolved.date_from, _utc(2024, 2, 29, 23, 0))
        self.assertEqual(resolved.date_to, _utc(2024, 3, 30, 23, 0))

    def test_invalid_timezone_propagates(self):
        with self.assertRaises(TimezoneResolutionError):
            resolve_timeframe("Nowhere/Special", "thisweek", REF)


if __name__ == "__main__":
    unittest.main()
