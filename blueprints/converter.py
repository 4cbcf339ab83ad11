"""Score converter routes: form page, assessment list, conversion API."""

import os
import logging
from flask import Blueprint, current_app, jsonify, request, send_from_directory

from auth import login_required
from converter import InputError, UnknownAssessmentError

logger = logging.getLogger(__name__)

bp = Blueprint('converter', __name__)

HTML_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def get_registry():
    return current_app.extensions.get('score_converters')


@bp.route('/')
def index():
    """Serve the converter form"""
    return send_from_directory(HTML_DIR, 'converter.html')


@bp.route('/api/assessments', methods=['GET'])
@login_required
def get_assessments():
    """Assessment names with their fitted slope/intercept, in display order."""
    registry = get_registry()
    if not registry:
        return jsonify({'error': 'Score converters not initialized'}), 500

    return jsonify({'assessments': registry.describe()})


@bp.route('/api/convert', methods=['POST'])
@login_required
def convert_score():
    """
    Convert one score for one assessment.
    Body (JSON or form): assessment, score
    Scores at or below the scale boundary convert forward to the vertical
    scale; scores above it convert back to the test scale.
    """
    registry = get_registry()
    if not registry:
        return jsonify({'error': 'Score converters not initialized'}), 500

    payload = request.get_json(silent=True)
    if payload is None:
        payload = request.form
    if not isinstance(payload, dict):
        return jsonify({'error': 'Request body must be an object'}), 400

    assessment = str(payload.get('assessment') or '').strip()
    if not assessment:
        return jsonify({'error': 'assessment is required'}), 400

    try:
        result = registry.convert(assessment, payload.get('score'))
    except InputError as e:
        return jsonify({'error': str(e)}), 400
    except UnknownAssessmentError as e:
        return jsonify({'error': str(e)}), 404
    except Exception as e:
        logger.error(f"Error converting score for {assessment}: {e}")
        return jsonify({'error': str(e)}), 500

    return jsonify(result)
