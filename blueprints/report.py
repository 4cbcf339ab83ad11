"""Serves the report written by build_report.py."""

import os
import logging
from flask import Blueprint, jsonify, send_from_directory

from config import REPORT_DIR, REPORT_FILENAME

logger = logging.getLogger(__name__)

bp = Blueprint('report', __name__)


@bp.route('/report')
def report():
    """Serve the linking report HTML file"""
    if not os.path.exists(os.path.join(REPORT_DIR, REPORT_FILENAME)):
        logger.warning(f"Report requested but not built yet: {REPORT_DIR}/{REPORT_FILENAME}")
        return jsonify({'error': 'Report has not been built. Run build_report.py.'}), 404
    return send_from_directory(REPORT_DIR, REPORT_FILENAME)
