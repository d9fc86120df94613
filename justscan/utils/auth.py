import logging
from functools import wraps

from flask import current_app, g, jsonify, request, session

from justscan.models.organization import Organization
from justscan.models.portal_session import PortalSession
from justscan.utils.db import to_object_id

logger = logging.getLogger(__name__)

PORTAL_SESSION_HEADER = "Portal-Session-Id"


# This decorator makes sure that only logged-in users can access protected routes
def login_required(view_function):
    @wraps(view_function)
    def decorated_function(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"message": "Please log in to access this resource."}), 401
        return view_function(*args, **kwargs)
    return decorated_function


def current_user_id():
    """ObjectId of the logged-in user, or None."""
    return to_object_id(session.get("user_id")) if "user_id" in session else None


# Organization-scoped routes need a valid portal session header.
# Sets g.organization and g.portal_session for the view.
def portal_session_required(view_function):
    @wraps(view_function)
    def decorated_function(*args, **kwargs):
        session_id = request.headers.get(PORTAL_SESSION_HEADER)
        if not session_id:
            return jsonify({"message": "Portal session required"}), 403

        try:
            portal_session = PortalSession.find_by_id(session_id)
            if not portal_session:
                return jsonify({"message": "Invalid portal session"}), 403

            if PortalSession.is_expired(portal_session):
                return jsonify({"message": "Portal session expired"}), 403

            organization = Organization.find_by_id(portal_session["organization_id"])
            if not organization:
                return jsonify({"message": "Invalid portal session"}), 403
        except Exception:
            logger.exception("[AUTH] Portal session lookup failed")
            return jsonify({"message": "Internal server error"}), 500

        g.portal_session = portal_session
        g.organization = organization
        return view_function(*args, **kwargs)
    return decorated_function


def logout_user():
    session.clear()
    return jsonify({"message": "logged out successfully"}), 200


def portal_session_hours():
    return current_app.config.get("PORTAL_SESSION_HOURS", 24)


def is_portal_owner():
    """True when the current portal session was opened by the organization owner."""
    return Organization.is_owner(g.organization, g.portal_session.get("user_id"))
