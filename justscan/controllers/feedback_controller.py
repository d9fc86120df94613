import logging

from flask import Blueprint, current_app, jsonify, request

from justscan.models.users import User
from justscan.utils.auth import current_user_id, login_required
from justscan.utils.mailer import send_mail

logger = logging.getLogger(__name__)

feedback_bp = Blueprint("feedback", __name__, url_prefix="/api/feedback")

MAX_FEEDBACK_LENGTH = 2000


@feedback_bp.route("", methods=["POST"])
@login_required
def submit_feedback():
    data = request.get_json(silent=True) or {}
    message = str(data.get("message") or "").strip()

    if not message:
        return jsonify({"message": "Feedback message cannot be empty"}), 400
    if len(message) > MAX_FEEDBACK_LENGTH:
        return jsonify({"message": f"Feedback message is too long (max {MAX_FEEDBACK_LENGTH} characters)"}), 400

    user = User.find_by_id(current_user_id()) or {}
    user_name = user.get("username") or "Anonymous User"
    user_email = user.get("email") or "no-email@example.com"

    try:
        sent = send_mail(
            current_app.config.get("FEEDBACK_EMAIL"),
            f"JustScan feedback from {user_name}",
            f"From: {user_name} <{user_email}>\n\n{message}",
            reply_to=user_email
        )
    except Exception:
        logger.exception("[FEEDBACK] Failed to send feedback")
        sent = False

    if not sent:
        return jsonify({"message": "Failed to send feedback. Please try again later."}), 500
    return jsonify({"message": "Thank you for your feedback!"}), 200
