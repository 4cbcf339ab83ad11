"""
Configuration constants and environment variables.
No project imports — this is a leaf module.
"""

import os
import secrets

# Flask session
SECRET_KEY = os.environ.get('FLASK_SECRET_KEY', secrets.token_hex(32))

# CORS
ALLOWED_ORIGINS = os.environ.get('ALLOWED_ORIGINS', '*').split(',')

# OAuth / domain
ALLOWED_DOMAIN = os.environ.get('ALLOWED_DOMAIN', 'firstlineschools.org')
GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID', '')
GOOGLE_CLIENT_SECRET = os.environ.get('GOOGLE_CLIENT_SECRET', '')

# Dev mode - bypasses OAuth for local testing
DEV_MODE = os.environ.get('FLASK_ENV') == 'development' or not GOOGLE_CLIENT_ID
DEV_USER_EMAIL = os.environ.get('DEV_USER_EMAIL', f'dev@{ALLOWED_DOMAIN}')

# ── Score data ──

# 'csv' reads SCORE_CSV_PATH, 'bigquery' reads SCORES_TABLE
SCORE_DATA_SOURCE = os.environ.get('SCORE_DATA_SOURCE', 'csv').lower()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
SCORE_CSV_PATH = os.environ.get('SCORE_CSV_PATH', os.path.join(BASE_DIR, 'data', 'scale_scores.csv'))

# BigQuery configuration
PROJECT_ID = os.environ.get('GCP_PROJECT_ID', 'talent-demo-482004')
SCORES_TABLE = os.environ.get('SCORES_TABLE', 'fls-data-warehouse.assessments.vertical_scale_scores')

# Input column names as delivered by the assessment vendor
TEST_NAME_COLUMN = 'TestName'
TEST_SCORE_COLUMN = 'TestScaledScore'
VERTICAL_SCORE_SOURCE_COLUMN = 'VerticalScale'
VERTICAL_SCORE_COLUMN = 'VerticalScaledScore'

# Boundary between the two scales: <= is a Test Scaled Score, > is a Vertical Scaled Score
SCALE_BOUNDARY = 600

# Display order for the assessment picker
ASSESSMENT_NAMES = [
    'Grade 3 Reading',
    'Grade 3 Math',
    'Grade 4 Reading',
    'Grade 4 Math',
    'Grade 5 Reading',
    'Grade 5 Math',
    'Grade 6 Reading',
    'Grade 6 Math',
    'Grade 7 Reading',
    'Grade 7 Math',
    'Grade 8 Reading',
    'Grade 8 Math',
]

# ── Report ──
REPORT_DIR = os.environ.get('REPORT_DIR', os.path.join(BASE_DIR, 'output'))
REPORT_FILENAME = 'report.html'
FITS_FILENAME = 'fits.json'
REPORT_TITLE = 'Test Scaled Score to Vertical Scaled Score Linking Report'

# Google Cloud Storage bucket for the published report
REPORT_BUCKET = os.environ.get('REPORT_BUCKET', '')
