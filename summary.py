"""
Descriptive statistics per assessment, plus a check of each assessment's
observed score ranges against the fixed scale boundary.
"""

import logging

import numpy as np

from config import SCALE_BOUNDARY, TEST_SCORE_COLUMN, VERTICAL_SCORE_COLUMN

logger = logging.getLogger(__name__)

STAT_KEYS = ['mean', 'sd', 'min', 'median', 'max']


def describe_scores(series):
    """mean / sd / min / median / max of one score column."""
    if series.empty:
        return {k: None for k in STAT_KEYS}
    sd = series.std(ddof=1)
    return {
        'mean': float(series.mean()),
        'sd': None if np.isnan(sd) else float(sd),
        'min': float(series.min()),
        'median': float(series.median()),
        'max': float(series.max()),
    }


def range_warnings(dataset, boundary=SCALE_BOUNDARY):
    """
    Flag students whose observed score would be routed the wrong way by the
    converter: a Test Scaled Score above the boundary is treated as vertical,
    a Vertical Scaled Score at or below it is treated as a test score.
    """
    warnings = []
    frame = dataset.frame

    high_test = int((frame[TEST_SCORE_COLUMN] > boundary).sum())
    if high_test:
        warnings.append(
            f"{high_test} Test Scaled Score(s) above {boundary} "
            f"(max {frame[TEST_SCORE_COLUMN].max():g}) would convert in the inverse direction"
        )

    low_vertical = int((frame[VERTICAL_SCORE_COLUMN] <= boundary).sum())
    if low_vertical:
        warnings.append(
            f"{low_vertical} Vertical Scaled Score(s) at or below {boundary} "
            f"(min {frame[VERTICAL_SCORE_COLUMN].min():g}) would convert in the forward direction"
        )

    return warnings


def summarize_assessment(dataset, boundary=SCALE_BOUNDARY):
    frame = dataset.frame
    n = len(frame)

    r = None
    if n > 1 and frame[TEST_SCORE_COLUMN].nunique() > 1 and frame[VERTICAL_SCORE_COLUMN].nunique() > 1:
        r = float(frame[TEST_SCORE_COLUMN].corr(frame[VERTICAL_SCORE_COLUMN]))

    summary = {
        'name': dataset.name,
        'n': n,
        'test': describe_scores(frame[TEST_SCORE_COLUMN]),
        'vertical': describe_scores(frame[VERTICAL_SCORE_COLUMN]),
        'r': r,
        'warnings': range_warnings(dataset, boundary),
    }

    for w in summary['warnings']:
        logger.warning(f"{dataset.name}: {w}")

    return summary


def summarize_all(datasets, names=None, boundary=SCALE_BOUNDARY):
    """Summaries in the given name order (defaults to the datasets' own order)."""
    names = list(datasets) if names is None else names
    return [summarize_assessment(datasets[name], boundary) for name in names]
