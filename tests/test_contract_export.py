from __future__ import annotations

import datetime as dt
import json
import unittest

from chronogrid.compose import compose_month, compose_week
from chronogrid.export import dumps_json, dumps_layout, layout_to_dict
from chronogrid.model import Event, ViewportSpec

WEEK_VP = ViewportSpec(visible_hour_start=7, visible_hour_end=22, pixels_per_hour=64, header_offset_px=174)


def _events():
    return [
        Event(id="a", title="a", date="2024-06-10", end_date="2024-06-10", start_time="09:00", end_time="10:00"),
        Event(id="m", title="m", date="2024-06-10", end_date="2024-06-12", start_time="", end_time=""),
    ]


class TestLayoutExportContract(unittest.TestCase):
    def test_week_dict_shape(self) -> None:
        out = layout_to_dict(compose_week(_events(), dt.date(2024, 6, 10), WEEK_VP, today=dt.date(2024, 6, 1)))
        self.assertEqual(out["view"], "week")
        self.assertEqual(out["hiddenBarCount"], 0)
        self.assertEqual(sorted(out["events"]), ["a", "m"])
        self.assertEqual(out["events"]["m"]["endDate"], "2024-06-12")
        mon = out["columns"][1]
        row9 = next(r for r in mon["hours"] if r["hour"] == 9)
        self.assertEqual(row9["blocks"][0]["columnSpan"], None)
        self.assertEqual(row9["blocks"][0]["topOffsetPx"], 128.0)

    def test_month_dict_shape(self) -> None:
        out = layout_to_dict(compose_month(_events(), dt.date(2024, 6, 1), today=dt.date(2024, 6, 1)))
        self.assertEqual((out["year"], out["month"]), (2024, 6))
        self.assertEqual(len(out["weeks"]), 6)
        cells = [c for w in out["weeks"] for c in w["cells"]]
        self.assertEqual(len(cells), 42)
        ten = next(c for c in cells if c["date"] == "2024-06-10")
        self.assertEqual((ten["eventIds"], ten["eventCount"]), (["a"], 2))

    def test_dumps_is_valid_json(self) -> None:
        layout = compose_week(_events(), dt.date(2024, 6, 10), WEEK_VP, today=dt.date(2024, 6, 1))
        self.assertEqual(json.loads(dumps_layout(layout)), layout_to_dict(layout))
        self.assertIn("\n", dumps_layout(layout, pretty=True))
        self.assertEqual(json.loads(dumps_json({"k": [1, 2]})), {"k": [1, 2]})

    def test_unknown_layout_type(self) -> None:
        with self.assertRaises((TypeError, AttributeError)):
            layout_to_dict(object())  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main(verbosity=2)
