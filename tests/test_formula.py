import unittest

from synthchar.formula import describe_elements, element_counts, iter_formula, parse_formula
from synthchar.periodic import default_table


class TestParseFormula(unittest.TestCase):
    def test_counts_in_order(self):
        self.assertEqual(parse_formula("La2O3"), (("La", 2), ("O", 3)))

    def test_missing_count_is_one(self):
        self.assertEqual(parse_formula("CaO"), (("Ca", 1), ("O", 1)))
        self.assertEqual(parse_formula("H3BO3"), (("H", 3), ("B", 1), ("O", 3)))

    def test_repeated_symbols_kept_separate(self):
        self.assertEqual(
            parse_formula("CH3COOH"),
            (("C", 1), ("H", 3), ("C", 1), ("O", 1), ("O", 1), ("H", 1)),
        )

    def test_unmatched_characters_are_skipped(self):
        self.assertEqual(parse_formula("CaO)-"), (("Ca", 1), ("O", 1)))
        # Group multipliers are not interpreted
        self.assertEqual(
            parse_formula("(NH4)2SO4"),
            (("N", 1), ("H", 4), ("S", 1), ("O", 4)),
        )
        self.assertEqual(parse_formula("cao"), ())
        self.assertEqual(parse_formula(""), ())

    def test_iterator_is_restartable(self):
        first = list(iter_formula("Na2CO3"))
        second = list(iter_formula("Na2CO3"))
        self.assertEqual(first, second)
        self.assertEqual(first, [("Na", 2), ("C", 1), ("O", 3)])


class TestElementHelpers(unittest.TestCase):
    def test_element_counts_merges_symbols(self):
        self.assertEqual(element_counts("CH3COOH"), {"C": 2, "H": 4, "O": 2})

    def test_describe_elements_uses_names(self):
        described = describe_elements("La2O3", default_table())
        self.assertEqual([d.element_name for d in described], ["Lanthanum", "Oxygen"])
        self.assertEqual([d.count for d in described], [2, 3])

    def test_describe_unknown_symbol_falls_back(self):
        described = describe_elements("Xx2O", default_table())
        self.assertEqual(described[0].element_name, "Xx")
        self.assertEqual(described[1].element_name, "Oxygen")

    def test_describe_without_table(self):
        described = describe_elements("CaO", None)
        self.assertEqual([d.element_name for d in described], ["Ca", "O"])


if __name__ == '__main__':
    unittest.main()
