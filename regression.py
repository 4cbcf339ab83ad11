"""
Single-predictor OLS regression of Vertical Scaled Score on Test Scaled Score.
Using numpy least squares with scipy.stats for p-values.
"""

import logging
from dataclasses import dataclass

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinearFit:
    """Slope/intercept pair linking the two scales. Created once, never updated."""
    slope: float
    intercept: float

    def forward(self, test_score):
        """Test Scaled Score -> Vertical Scaled Score (unrounded)."""
        return self.slope * test_score + self.intercept

    def inverse(self, vertical_score):
        """Vertical Scaled Score -> Test Scaled Score (unrounded)."""
        return (vertical_score - self.intercept) / self.slope

    def to_dict(self):
        return {'slope': self.slope, 'intercept': self.intercept}


def ols_regression(x, y):
    """
    OLS regression of y on a single predictor x, with intercept.
    Returns dict with coefficients, R-squared, adj R-squared, p-values, etc.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    if x.shape != y.shape:
        raise ValueError(f"x and y must have the same length ({len(x)} != {len(y)})")
    n = len(y)
    if n < 2:
        raise ValueError(f"At least 2 score pairs are required for a fit, got {n}")
    if np.ptp(x) == 0:
        raise ValueError("Test Scaled Score has no variance; slope is undefined")
    if np.ptp(y) == 0:
        raise ValueError("Vertical Scaled Score has no variance; the fit cannot be inverted")

    X = np.column_stack([np.ones(n), x])
    k = X.shape[1]  # includes intercept

    beta, _, _, _ = np.linalg.lstsq(X, y, rcond=None)

    y_hat = X @ beta
    ss_res = np.sum((y - y_hat)**2)
    ss_tot = np.sum((y - np.mean(y))**2)
    r_sq = 1 - ss_res / ss_tot
    df = n - k

    # Standard errors, t-stats and p-values need at least one residual degree of freedom
    if df > 0:
        mse = ss_res / df
        var_beta = mse * np.linalg.inv(X.T @ X)
        se = np.sqrt(np.diag(var_beta))
        with np.errstate(divide='ignore', invalid='ignore'):
            t_stats = beta / se
        p_values = 2 * (1 - stats.t.cdf(np.abs(t_stats), df=df))
        adj_r_sq = 1 - (1 - r_sq) * (n - 1) / df
        rmse = np.sqrt(mse)
    else:
        se = t_stats = p_values = np.full(k, np.nan)
        adj_r_sq = np.nan
        rmse = 0.0

    mae = np.mean(np.abs(y - y_hat))

    return {
        'n': n,
        'k': k - 1,  # predictors (not counting intercept)
        'r_sq': float(r_sq),
        'adj_r_sq': float(adj_r_sq),
        'rmse': float(rmse),
        'mae': float(mae),
        'intercept': float(beta[0]),
        'intercept_se': float(se[0]),
        'intercept_t': float(t_stats[0]),
        'intercept_p': float(p_values[0]),
        'slope': float(beta[1]),
        'slope_se': float(se[1]),
        'slope_t': float(t_stats[1]),
        'slope_p': float(p_values[1]),
    }


def fit_assessment(dataset):
    """
    Fit VerticalScaledScore on TestScaledScore for one AssessmentDataset.
    Returns (LinearFit, regression result dict).
    """
    result = ols_regression(dataset.test_scores, dataset.vertical_scores)
    fit = LinearFit(slope=result['slope'], intercept=result['intercept'])
    logger.info(f"{dataset.name}: n={result['n']}, intercept={fit.intercept:.3f}, "
                f"slope={fit.slope:.4f}, R²={result['r_sq']:.4f}")
    return fit, result


def significance_stars(p):
    if p is None or np.isnan(p):
        return ''
    return '***' if p < 0.001 else '**' if p < 0.01 else '*' if p < 0.05 else ''
