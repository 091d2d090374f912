"""Regression tests for keyword routing.

The keyword lists and their priority order are relied on by callers, so the
tests pin both the individual keywords and the precedence between kinds.
"""

import unittest

from budget_insights.query_classifier import AnalysisKind, KEYWORD_RULES, classify


class ClassifierKeywordTests(unittest.TestCase):
    """Each keyword routes to its own kind."""

    def test_every_keyword_routes_to_its_kind(self):
        for kind, keywords in KEYWORD_RULES:
            for keyword in keywords:
                with self.subTest(keyword=keyword):
                    self.assertEqual(classify(f"please show {keyword} now"), kind)

    def test_matching_is_case_insensitive(self):
        self.assertEqual(classify("Show me the TREND"), AnalysisKind.TREND)
        self.assertEqual(classify("General Ledger please"), AnalysisKind.LEDGER)

    def test_unmatched_question_falls_back_to_general(self):
        self.assertEqual(classify("hello there"), AnalysisKind.GENERAL)
        self.assertEqual(classify(""), AnalysisKind.GENERAL)
        self.assertEqual(classify(None), AnalysisKind.GENERAL)

    def test_plain_substring_matching(self):
        """No word boundaries: 'summary' contains 'sum', 'glance' contains 'gl'."""
        self.assertEqual(classify("give me a summary"), AnalysisKind.TOTALS)
        self.assertEqual(classify("at a glance"), AnalysisKind.LEDGER)


class ClassifierPriorityTests(unittest.TestCase):
    """First matching kind in the fixed order wins."""

    def test_trend_beats_totals(self):
        self.assertEqual(classify("What is the total trend?"), AnalysisKind.TREND)

    def test_trend_beats_variance(self):
        self.assertEqual(classify("yearly variance please"), AnalysisKind.TREND)

    def test_missed_beats_discrepancy(self):
        self.assertEqual(classify("which items missed with a big difference"), AnalysisKind.MISSED_BUDGET)

    def test_variance_beats_average(self):
        self.assertEqual(classify("What's our average budget variance?"), AnalysisKind.DISCREPANCY)

    def test_discrepancy_beats_ledger(self):
        self.assertEqual(classify("Do you see any discrepancies in GL entries?"), AnalysisKind.DISCREPANCY)

    def test_example_questions(self):
        expectations = {
            "What was the trend for our yearly budget submissions?": AnalysisKind.TREND,
            "How many years did we miss the budget plan?": AnalysisKind.MISSED_BUDGET,
            "Are we over budget?": AnalysisKind.MISSED_BUDGET,
            "Show me the worst performing budget categories": AnalysisKind.PERFORMANCE,
            "What is the mean spend?": AnalysisKind.AVERAGES,
        }
        for question, kind in expectations.items():
            with self.subTest(question=question):
                self.assertEqual(classify(question), kind)


if __name__ == "__main__":
    unittest.main()
