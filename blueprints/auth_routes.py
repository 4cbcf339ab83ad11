"""Authentication routes: login, callback, logout, auth status."""

import logging
from flask import Blueprint, jsonify, redirect, url_for, session, request

from config import DEV_MODE, DEV_USER_EMAIL
from extensions import oauth
from auth import is_allowed_email

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__)


def safe_next_url(next_url):
    """Only same-site paths; anything else falls back to the converter page."""
    if not next_url or not next_url.startswith('/') or next_url.startswith('//') or '\\' in next_url:
        return '/'
    return next_url


@bp.route('/login')
def login():
    """Initiate Google OAuth flow"""
    next_url = safe_next_url(request.args.get('next'))
    session['login_next'] = next_url

    if DEV_MODE:
        logger.info(f"DEV MODE: Auto-authenticating as {DEV_USER_EMAIL}")
        session['user'] = {
            'email': DEV_USER_EMAIL,
            'name': 'Dev User',
            'picture': '',
        }
        return redirect(next_url)

    google = oauth.create_client('google')
    redirect_uri = url_for('auth.auth_callback', _external=True)
    return google.authorize_redirect(redirect_uri)


@bp.route('/auth/callback')
def auth_callback():
    """Handle OAuth callback from Google"""
    try:
        google = oauth.create_client('google')
        token = google.authorize_access_token()
        userinfo = token.get('userinfo')

        if not userinfo:
            logger.error("No userinfo in token")
            return redirect('/?error=auth_failed')

        email = userinfo.get('email', '')
        if not is_allowed_email(email):
            domain = email.split('@')[-1] if '@' in email else ''
            logger.warning(f"Unauthorized domain attempt: {email}")
            return redirect(f'/?error=unauthorized_domain&domain={domain}')

        session['user'] = {
            'email': email,
            'name': userinfo.get('name', ''),
            'picture': userinfo.get('picture', ''),
        }

        logger.info(f"User authenticated: {email}")
        next_url = safe_next_url(session.pop('login_next', None))
        return redirect(next_url)

    except Exception as e:
        logger.error(f"OAuth callback error: {e}")
        return redirect('/?error=auth_failed')


@bp.route('/logout')
def logout():
    """Clear session and log out user"""
    session.clear()
    return redirect('/')


@bp.route('/api/auth/status')
def auth_status():
    """Return current authentication status"""
    if 'user' in session:
        return jsonify({'authenticated': True, 'user': session['user']})
    return jsonify({'authenticated': False, 'user': None})
