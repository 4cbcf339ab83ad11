"""Health check blueprint."""

from flask import Blueprint, current_app, jsonify

from config import SCORE_DATA_SOURCE

bp = Blueprint('health', __name__)


@bp.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    registry = current_app.extensions.get('score_converters')
    return jsonify({
        'status': 'healthy',
        'converters_loaded': len(registry) if registry else 0,
        'data_source': SCORE_DATA_SOURCE,
    })
