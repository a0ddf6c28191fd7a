from __future__ import annotations

import datetime as dt
import unittest

from chronogrid.util.viewkey import make_view_key

D = dt.date(2024, 6, 10)


class TestViewKeyContract(unittest.TestCase):
    def test_key_is_stable_hex(self) -> None:
        k1 = make_view_key("week", D, 7, 22, 64, 174, 1)
        k2 = make_view_key("week", D, 7, 22, 64, 174, 1)
        self.assertEqual(k1, k2)
        self.assertEqual(len(k1), 8)
        int(k1, 16)

    def test_every_input_changes_the_key(self) -> None:
        base = make_view_key("week", D, 7, 22, 64, 174, 1)
        self.assertNotEqual(base, make_view_key("day", D, 7, 22, 64, 174, 1))
        self.assertNotEqual(base, make_view_key("week", D + dt.timedelta(days=1), 7, 22, 64, 174, 1))
        self.assertNotEqual(base, make_view_key("week", D, 8, 22, 64, 174, 1))
        self.assertNotEqual(base, make_view_key("week", D, 7, 22, 48, 174, 1))
        self.assertNotEqual(base, make_view_key("week", D, 7, 22, 64, 174, 2))
        self.assertNotEqual(base, make_view_key("week", D, 7, 22, 64, 174, 1, expanded=True))


if __name__ == "__main__":
    unittest.main(verbosity=2)
