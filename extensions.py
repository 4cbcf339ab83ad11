"""
Shared extension objects: BigQuery client and OAuth.
Imports only from config (no circular deps).
"""

import logging
from google.cloud import bigquery
from authlib.integrations.flask_client import OAuth

from config import PROJECT_ID, SCORE_DATA_SOURCE

logger = logging.getLogger(__name__)

# BigQuery client — only needed when scores are read from a warehouse table
bq_client = None
if SCORE_DATA_SOURCE == 'bigquery':
    try:
        bq_client = bigquery.Client(project=PROJECT_ID)
        logger.info(f"BigQuery client initialized for project: {PROJECT_ID}")
    except Exception as e:
        logger.error(f"Failed to initialize BigQuery client: {e}")
        bq_client = None

# OAuth object — call oauth.init_app(app) inside create_app()
oauth = OAuth()
