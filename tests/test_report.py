import json
import unittest
from datetime import date

from synthchar.constants import UNRESOLVED_PLACEHOLDER
from synthchar.periodic import default_table
from synthchar.report import DEFAULT_TITLE, build_report_snapshot, format_value
from synthchar.session import EditComponentFormula, TableLoaded, derive, initial_state, reduce


class TestFormatValue(unittest.TestCase):
    def test_fixed_point(self):
        self.assertEqual(format_value(1.776319, 4), "1.7763")
        self.assertEqual(format_value(56.077, 3), "56.077")

    def test_unresolved_placeholder(self):
        self.assertEqual(format_value(None), UNRESOLVED_PLACEHOLDER)


class TestReportSnapshot(unittest.TestCase):
    def setUp(self):
        self.state = reduce(initial_state(), TableLoaded(default_table()))

    def test_snapshot_copies_derived_results(self):
        derived = derive(self.state)
        snapshot = build_report_snapshot(derived, generated_on=date(2024, 3, 1))

        self.assertEqual(snapshot.title, DEFAULT_TITLE)
        self.assertEqual(list(snapshot.weight_percents), derived.weight_percents)
        self.assertEqual(snapshot.total_weight, derived.total_weight)
        self.assertAlmostEqual(snapshot.matrix_total, 100.0)
        self.assertEqual(snapshot.warning, "")
        self.assertTrue(snapshot.gf_mode)
        self.assertEqual(snapshot.gf_total_weight, derived.gf_total_weight)
        self.assertEqual(snapshot.product_total_weight, derived.product_total_weight)
        self.assertEqual(len(snapshot.product_results), 3)

    def test_to_dict_is_json_ready(self):
        snapshot = build_report_snapshot(
            derive(self.state), title="Borate glass", generated_on=date(2024, 3, 1)
        )
        payload = snapshot.to_dict()

        self.assertEqual(payload["title"], "Borate glass")
        self.assertEqual(payload["generated_on"], "2024-03-01")
        self.assertEqual(payload["component_results"][0]["formula"], "CaO")
        self.assertIn("composition", payload)
        restored = json.loads(json.dumps(payload))
        self.assertAlmostEqual(sum(restored["weight_percents"]), 5.0)

    def test_unresolved_rows_stay_none(self):
        state = reduce(self.state, EditComponentFormula(0, "Qq"))
        payload = build_report_snapshot(derive(state)).to_dict()
        self.assertIsNone(payload["weight_percents"][0])
        self.assertIsNone(payload["component_results"][0]["molecular_weight"])

    def test_default_date_is_today(self):
        snapshot = build_report_snapshot(derive(self.state))
        self.assertEqual(snapshot.generated_on, date.today())


if __name__ == "__main__":
    unittest.main()
