"""
Score dataset loading.

Reads paired Test Scaled Score / Vertical Scale rows from a CSV export or a
BigQuery table, drops incomplete pairs, and splits the rows into one
AssessmentDataset per TestName.
"""

import logging

import numpy as np
import pandas as pd
from google.cloud import bigquery

from config import (
    ASSESSMENT_NAMES, PROJECT_ID, SCORES_TABLE, SCORE_CSV_PATH, SCORE_DATA_SOURCE,
    TEST_NAME_COLUMN, TEST_SCORE_COLUMN,
    VERTICAL_SCORE_SOURCE_COLUMN, VERTICAL_SCORE_COLUMN,
)

logger = logging.getLogger(__name__)

SOURCE_COLUMNS = [TEST_NAME_COLUMN, TEST_SCORE_COLUMN, VERTICAL_SCORE_SOURCE_COLUMN]
SCORE_COLUMNS = [TEST_SCORE_COLUMN, VERTICAL_SCORE_COLUMN]


class DatasetError(Exception):
    """Raised when a score dataset cannot be read or is missing columns."""


class AssessmentDataset:
    """Paired scores for one grade/subject assessment, in input order."""

    def __init__(self, name, frame):
        self.name = name
        self.frame = frame[SCORE_COLUMNS].reset_index(drop=True)

    def __len__(self):
        return len(self.frame)

    def __repr__(self):
        return f"AssessmentDataset({self.name!r}, n={len(self)})"

    @property
    def test_scores(self):
        return self.frame[TEST_SCORE_COLUMN].to_numpy(dtype=float)

    @property
    def vertical_scores(self):
        return self.frame[VERTICAL_SCORE_COLUMN].to_numpy(dtype=float)

    @classmethod
    def from_pairs(cls, name, pairs):
        """Build a dataset from (test_scaled_score, vertical_scaled_score) tuples."""
        frame = pd.DataFrame(list(pairs), columns=SCORE_COLUMNS, dtype=float)
        return cls(name, frame)


def clean_scores(frame):
    """
    Normalize a raw score frame.
    Renames VerticalScale, coerces both score columns to numbers and drops
    rows where either score or the test name is missing.
    """
    missing = [c for c in SOURCE_COLUMNS if c not in frame.columns]
    if missing:
        raise DatasetError(f"Score data is missing required columns: {', '.join(missing)}")

    df = frame[SOURCE_COLUMNS].rename(columns={VERTICAL_SCORE_SOURCE_COLUMN: VERTICAL_SCORE_COLUMN})
    df[TEST_NAME_COLUMN] = df[TEST_NAME_COLUMN].astype('string').str.strip()
    for col in SCORE_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors='coerce')
    df[SCORE_COLUMNS] = df[SCORE_COLUMNS].replace([np.inf, -np.inf], np.nan)

    before = len(df)
    df = df.dropna(subset=[TEST_NAME_COLUMN] + SCORE_COLUMNS)
    df = df[df[TEST_NAME_COLUMN] != '']
    dropped = before - len(df)
    if dropped:
        logger.info(f"Dropped {dropped} of {before} score rows with missing or non-numeric values")

    return df.reset_index(drop=True)


def load_from_csv(path=SCORE_CSV_PATH):
    """Load and clean the score export at path."""
    try:
        raw = pd.read_csv(path)
    except FileNotFoundError as e:
        raise DatasetError(f"Score file not found: {path}") from e
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DatasetError(f"Could not parse score file {path}: {e}") from e

    logger.info(f"Read {len(raw)} score rows from {path}")
    return clean_scores(raw)


def load_from_bigquery(client=None, table=SCORES_TABLE):
    """Load and clean the score table from BigQuery."""
    if client is None:
        from extensions import bq_client
        client = bq_client or bigquery.Client(project=PROJECT_ID)

    query = f"""
        SELECT {TEST_NAME_COLUMN}, {TEST_SCORE_COLUMN}, {VERTICAL_SCORE_SOURCE_COLUMN}
        FROM `{table}`
    """
    try:
        rows = list(client.query(query).result())
    except Exception as e:
        logger.error(f"Error querying score table {table}: {e}")
        raise DatasetError(f"Could not read score table {table}: {e}") from e

    raw = pd.DataFrame.from_records([dict(row.items()) for row in rows], columns=SOURCE_COLUMNS)
    logger.info(f"Read {len(raw)} score rows from {table}")
    return clean_scores(raw)


def load_scores(source=SCORE_DATA_SOURCE, csv_path=SCORE_CSV_PATH):
    """Load the cleaned score frame from the configured source."""
    if source == 'csv':
        return load_from_csv(csv_path)
    if source == 'bigquery':
        return load_from_bigquery()
    raise DatasetError(f"Unknown score data source: {source}")


def group_by_assessment(frame):
    """Split a cleaned score frame into {TestName: AssessmentDataset}."""
    datasets = {}
    for name, group in frame.groupby(TEST_NAME_COLUMN, sort=False):
        datasets[str(name)] = AssessmentDataset(str(name), group)
    return datasets


def load_assessment_datasets(source=SCORE_DATA_SOURCE, csv_path=SCORE_CSV_PATH):
    """Load the configured source and group it by assessment."""
    datasets = group_by_assessment(load_scores(source, csv_path))
    logger.info(f"Loaded {len(datasets)} assessments: {', '.join(datasets)}")
    return datasets


def ordered_assessment_names(datasets, order=ASSESSMENT_NAMES):
    """Names in display order: configured names first, then any others alphabetically."""
    names = [n for n in order if n in datasets]
    return names + sorted(n for n in datasets if n not in order)
