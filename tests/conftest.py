# tests/conftest.py

"""
Pytest Fixtures - synthetic score data, converter registry and Flask client

FIT REFERENCE:
- Grade 3 Reading: intercept 632.98, slope 2.0528
- Grade 8 Math:    intercept 940.52, slope 1.6673
- Remaining ten assessments use slopes/intercepts spread over the same range
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import ASSESSMENT_NAMES
from converter import ConverterRegistry
from scores import AssessmentDataset


KNOWN_FITS = {
    'Grade 3 Reading': (2.0528, 632.98),
    'Grade 8 Math': (1.6673, 940.52),
}

TEST_SCORES = list(range(250, 601, 5))


def linear_pairs(slope, intercept, xs=TEST_SCORES):
    return [(x, slope * x + intercept) for x in xs]


def all_fits():
    """Slope/intercept for all twelve assessments."""
    fits = {}
    for i, name in enumerate(ASSESSMENT_NAMES):
        fits[name] = KNOWN_FITS.get(name, (1.5 + 0.08 * i, 980.0 - 25.0 * i))
    return fits


# =============================================================================
# DATASETS / REGISTRY
# =============================================================================

@pytest.fixture
def datasets():
    """One exactly-linear AssessmentDataset per assessment."""
    return {
        name: AssessmentDataset.from_pairs(name, linear_pairs(slope, intercept))
        for name, (slope, intercept) in all_fits().items()
    }


@pytest.fixture
def registry(datasets):
    return ConverterRegistry.from_datasets(datasets)


@pytest.fixture
def noisy_dataset():
    """Grade 5 Math-like data with alternating residuals of +/- 12 points."""
    pairs = []
    for i, x in enumerate(TEST_SCORES):
        noise = 12 if i % 2 == 0 else -12
        pairs.append((x, 1.9 * x + 700 + noise))
    return AssessmentDataset.from_pairs('Grade 5 Math', pairs)


# =============================================================================
# FLASK TEST CLIENT FIXTURES
# =============================================================================

@pytest.fixture
def app(registry):
    from app import create_app
    flask_app = create_app(registry)
    flask_app.config['TESTING'] = True
    flask_app.config['SESSION_COOKIE_SECURE'] = False
    return flask_app


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    return app.test_client()


@pytest.fixture
def auth_client(app):
    """Test client with a signed-in session."""
    test_client = app.test_client()
    with test_client.session_transaction() as sess:
        sess['user'] = {'email': 'teacher@firstlineschools.org', 'name': 'Test User', 'picture': ''}
    return test_client
