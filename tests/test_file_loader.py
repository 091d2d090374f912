"""Tests for spreadsheet loading into budget records."""

import os
import tempfile
import unittest

import numpy as np
import pandas as pd

from budget_insights.exceptions import BudgetInsightsError, EmptyRecordSetError
from budget_insights.file_loader import DataLoadError, load_records, records_from_frame


class FileLoaderTests(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = self._tmp.name
        self.df = pd.DataFrame({
            'Year': [2021, 2022],
            'Budget': [100.0, np.nan],
            'Actual': [120.0, 90.0],
            'Category': ['Travel', 'Rent'],
            'GL_Account': ['4000', '4100'],
        })

    def tearDown(self):
        self._tmp.cleanup()

    def test_csv_rows_become_records(self):
        path = os.path.join(self.tmp_dir, 'budget.csv')
        self.df.to_csv(path, index=False)

        records = load_records(path)
        self.assertEqual(len(records), 2)
        self.assertEqual(records[0]['Year'], 2021)
        self.assertIsInstance(records[0]['Year'], int)
        self.assertEqual(records[0]['Category'], 'Travel')
        # empty cell omitted
        self.assertNotIn('Budget', records[1])

    def test_excel_first_sheet(self):
        path = os.path.join(self.tmp_dir, 'budget.xlsx')
        self.df.to_excel(path, index=False)

        records = load_records(path)
        self.assertEqual([r['Category'] for r in records], ['Travel', 'Rent'])
        self.assertEqual(records[0]['Actual'], 120.0)

    def test_unsupported_extension(self):
        path = os.path.join(self.tmp_dir, 'budget.txt')
        with open(path, 'w') as f:
            f.write('Year,Budget\n2021,1\n')
        with self.assertRaises(DataLoadError):
            load_records(path)

    def test_missing_file(self):
        with self.assertRaises(DataLoadError):
            load_records(os.path.join(self.tmp_dir, 'missing.xlsx'))

    def test_corrupt_workbook(self):
        path = os.path.join(self.tmp_dir, 'broken.xlsx')
        with open(path, 'wb') as f:
            f.write(b'this is not a workbook')
        with self.assertRaises(DataLoadError) as ctx:
            load_records(path)
        self.assertIsNotNone(ctx.exception.__cause__)

    def test_records_from_frame_converts_types(self):
        records = records_from_frame(pd.DataFrame({'Year': [2021], 'Budget': [np.float64(5.5)], 'Note': [None]}))
        self.assertEqual(records, [{'Year': 2021, 'Budget': 5.5}])


class ErrorHierarchyTests(unittest.TestCase):

    def test_errors_share_package_base(self):
        self.assertTrue(issubclass(DataLoadError, BudgetInsightsError))
        self.assertTrue(issubclass(EmptyRecordSetError, BudgetInsightsError))
        self.assertTrue(issubclass(EmptyRecordSetError, ValueError))

    def test_loader_error_caught_by_package_base(self):
        with self.assertRaises(BudgetInsightsError):
            load_records('/nonexistent/missing.csv')


if __name__ == "__main__":
    unittest.main()
