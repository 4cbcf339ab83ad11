"""
Shared authentication helpers.
Imports from config only (no circular deps).
"""

import logging
from functools import wraps
from flask import session, jsonify

from config import ALLOWED_DOMAIN

logger = logging.getLogger(__name__)


def login_required(f):
    """Decorator to protect routes - requires valid session"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user' not in session:
            return jsonify({'error': 'Authentication required'}), 401
        return f(*args, **kwargs)
    return decorated_function


def is_allowed_email(email):
    """Check that an email belongs to the allowed Google Workspace domain."""
    if not email or '@' not in email:
        return False
    domain = email.rsplit('@', 1)[-1]
    return domain.lower() == ALLOWED_DOMAIN.lower()
