# tests/test_scores.py

"""
Score Loading Tests - cleaning, CSV / BigQuery sources, grouping
"""

from unittest.mock import MagicMock

import pandas as pd
import pytest

from scores import (
    AssessmentDataset, DatasetError, clean_scores, group_by_assessment,
    load_assessment_datasets, load_from_bigquery, load_from_csv, load_scores,
    ordered_assessment_names,
)


RAW_CSV = """TestName,TestScaledScore,VerticalScale,StudentId
Grade 3 Reading,400,1454,1
Grade 3 Reading,,1400,2
Grade 8 Math,300,1441,3
Grade 3 Reading,450,NA,4
Grade 8 Math,abc,1500,5
Grade 3 Reading,350,1351,6
,420,1500,7
Grade 8 Math,350,1524,8
"""


@pytest.fixture
def score_csv(tmp_path):
    path = tmp_path / "scale_scores.csv"
    path.write_text(RAW_CSV)
    return path


class TestCleanScores:
    """Tests for clean_scores()."""

    def test_drops_incomplete_rows(self, score_csv):
        df = clean_scores(pd.read_csv(score_csv))
        assert len(df) == 4
        assert df['TestScaledScore'].tolist() == [400, 300, 350, 350]

    def test_renames_vertical_column(self, score_csv):
        df = clean_scores(pd.read_csv(score_csv))
        assert list(df.columns) == ['TestName', 'TestScaledScore', 'VerticalScaledScore']

    def test_missing_column(self):
        frame = pd.DataFrame({'TestName': ['Grade 3 Reading'], 'TestScaledScore': [400]})
        with pytest.raises(DatasetError, match='VerticalScale'):
            clean_scores(frame)

    def test_strips_test_names(self):
        frame = pd.DataFrame({
            'TestName': [' Grade 3 Reading ', '   '],
            'TestScaledScore': [400, 410],
            'VerticalScale': [1454, 1470],
        })
        df = clean_scores(frame)
        assert df['TestName'].tolist() == ['Grade 3 Reading']


class TestLoaders:
    """Tests for the CSV and BigQuery loaders."""

    def test_load_from_csv(self, score_csv):
        df = load_from_csv(score_csv)
        assert set(df['TestName']) == {'Grade 3 Reading', 'Grade 8 Math'}

    def test_load_from_csv_missing_file(self, tmp_path):
        with pytest.raises(DatasetError):
            load_from_csv(tmp_path / "missing.csv")

    def test_load_from_csv_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(DatasetError):
            load_from_csv(path)

    def test_load_from_bigquery(self):
        rows = [
            {'TestName': 'Grade 3 Reading', 'TestScaledScore': 400, 'VerticalScale': 1454},
            {'TestName': 'Grade 3 Reading', 'TestScaledScore': None, 'VerticalScale': 1400},
            {'TestName': 'Grade 8 Math', 'TestScaledScore': 300, 'VerticalScale': 1441},
        ]
        client = MagicMock()
        client.query.return_value.result.return_value = [MagicMock(items=r.items) for r in rows]

        df = load_from_bigquery(client, table='proj.dataset.scores')

        assert len(df) == 2
        query = client.query.call_args[0][0]
        assert '`proj.dataset.scores`' in query
        assert 'VerticalScale' in query

    def test_load_from_bigquery_error(self):
        client = MagicMock()
        client.query.side_effect = RuntimeError("permission denied")
        with pytest.raises(DatasetError, match='permission denied'):
            load_from_bigquery(client, table='proj.dataset.scores')

    def test_unknown_source(self):
        with pytest.raises(DatasetError):
            load_scores(source='parquet')


class TestGrouping:
    """Tests for group_by_assessment() and AssessmentDataset."""

    def test_groups_preserve_row_order(self, score_csv):
        datasets = group_by_assessment(load_from_csv(score_csv))
        assert set(datasets) == {'Grade 3 Reading', 'Grade 8 Math'}
        g3 = datasets['Grade 3 Reading']
        assert len(g3) == 2
        assert g3.test_scores.tolist() == [400.0, 350.0]
        assert g3.vertical_scores.tolist() == [1454.0, 1351.0]

    def test_load_assessment_datasets(self, score_csv):
        datasets = load_assessment_datasets('csv', score_csv)
        assert len(datasets['Grade 8 Math']) == 2

    def test_from_pairs(self):
        ds = AssessmentDataset.from_pairs('Grade 6 Math', [(300, 1200), (400, 1400)])
        assert ds.name == 'Grade 6 Math'
        assert list(ds.frame.columns) == ['TestScaledScore', 'VerticalScaledScore']
        assert repr(ds) == "AssessmentDataset('Grade 6 Math', n=2)"

    def test_ordered_assessment_names(self):
        datasets = {'Other': None, 'Grade 4 Math': None, 'Grade 3 Reading': None}
        assert ordered_assessment_names(datasets) == ['Grade 3 Reading', 'Grade 4 Math', 'Other']
