import unittest
from datetime import date, timedelta

from tootmetrics.analytics.schemas import ChartPoint
from tootmetrics.analytics.series import build_delta_series, render_csv, series_frame


def _snapshots(field, values, start=date(2024, 5, 1)):
    return [{"day": start + timedelta(days=i), field: val} for i, val in enumerate(values)]


class DeltaSeriesTests(unittest.TestCase):
    def test_clamped_regression_becomes_zero(self):
        points = build_delta_series(_snapshots("boosts_count", [100, 95, 130]), "boosts_count", clamp_negative=True)
        self.assertEqual([p.value for p in points], [0, 35])
        self.assertEqual([p.time for p in points], ["2024-05-02", "2024-05-03"])

    def test_unclamped_keeps_losses(self):
        points = build_delta_series(
            _snapshots("followers_count", [1000, 950, 980]), "followers_count", clamp_negative=False
        )
        self.assertEqual([p.value for p in points], [-50, 30])

    def test_zero_deltas_are_emitted(self):
        points = build_delta_series(_snapshots("replies_count", [5, 5, 7, 7]), "replies_count", clamp_negative=True)
        self.assertEqual([p.value for p in points], [0, 2, 0])

    def test_no_predecessor_no_points(self):
        self.assertEqual(build_delta_series([], "replies_count", True), [])
        self.assertEqual(build_delta_series(_snapshots("replies_count", [5]), "replies_count", True), [])

    def test_missing_counters_are_skipped(self):
        points = build_delta_series(
            _snapshots("favourites_count", [10, 12, None, 20, 26]), "favourites_count", clamp_negative=True
        )
        self.assertEqual([(p.time, p.value) for p in points], [("2024-05-02", 2), ("2024-05-05", 6)])


class CsvRenderTests(unittest.TestCase):
    def test_render_csv(self):
        points = [ChartPoint(time="2024-05-02", value=0), ChartPoint(time="2024-05-03", value=35)]
        self.assertEqual(render_csv(points, "Boosts"), "Date;Boosts\n2024-05-02;0\n2024-05-03;35\n")
        self.assertEqual(render_csv(points, "Boosts", delimiter=","), "Date,Boosts\n2024-05-02,0\n2024-05-03,35\n")

    def test_render_empty_csv(self):
        self.assertEqual(render_csv([], "Followers"), "Date;Followers\n")

    def test_series_frame(self):
        frame = series_frame([ChartPoint(time="2024-05-02", value=-3)], "Followers")
        self.assertEqual(list(frame.columns), ["Date", "Followers"])
        self.assertEqual(frame.iloc[0]["Followers"], -3)


if __name__ == "__main__":
    unittest.main()
