import unittest

from lox.lang import numerical


class NumericalTestCase(unittest.TestCase):

    def test_number(self):
        should_pass = {"0": 0.0, "42": 42.0, "3.25": 3.25, "007": 7.0}
        for case, result in should_pass.items():
            self.assertEqual(result, numerical.number(case))
            self.assertIsInstance(numerical.number(case), float)

    def test_stringify_number(self):
        # pairs rather than a dict: 0.0 and -0.0 are the same key
        should_pass = [
            (1.0, "1"), (0.0, "0"), (-0.0, "-0"), (2.5, "2.5"), (-3.0, "-3"), (1e21, "1e+21"),
            (0.1 + 0.2, "0.30000000000000004"), (float("inf"), "inf"), (float("-inf"), "-inf"), (float("nan"), "nan"),
        ]
        for case, result in should_pass:
            self.assertEqual(result, numerical.stringify_number(case), case)


if __name__ == '__main__':
    unittest.main()
