import logging

from flask import Blueprint, jsonify, request, session
from pymongo.errors import DuplicateKeyError

from justscan.models.organization import Organization
from justscan.models.users import User
from justscan.utils.auth import current_user_id, login_required, logout_user
from justscan.utils.db import serialize_doc

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/api/users")

MIN_PASSWORD_LENGTH = 4


def _read_credentials():
    data = request.get_json(silent=True) or {}
    email = str(data.get("email") or "").strip().lower()
    password = str(data.get("password") or "")
    return data, email, password


def _credentials_error(email, password):
    if "@" not in email or "." not in email.split("@")[-1]:
        return "Email must be a valid email address"
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"password must be atleast {MIN_PASSWORD_LENGTH} characters long"
    return None


def _profile(user):
    """User without password, with created/joined organizations expanded."""
    profile = User.public(user)
    for field in ("created_orgs", "joined_orgs"):
        orgs = []
        for org_id in user.get(field, []):
            org = Organization.find_by_id(org_id)
            if org:
                orgs.append({"_id": org["_id"], "name": org["name"]})
        profile[field] = orgs
    return serialize_doc(profile)


# Register
@auth_bp.route("/register", methods=["POST"])
def register():
    data, email, password = _read_credentials()
    error = _credentials_error(email, password)
    if error:
        return jsonify({"message": error}), 400

    if User.find_by_email(email):
        return jsonify({"message": "Email already registered"}), 400

    username = str(data.get("username") or email.split("@")[0]).strip()
    user = User(username=username, email=email, password=password).to_dict()
    try:
        result = User.collection().insert_one(user)
    except DuplicateKeyError:
        return jsonify({"message": "Email already registered"}), 400

    user["_id"] = result.inserted_id
    session["user_id"] = str(user["_id"])
    session["user_name"] = user["username"]
    logger.info("[AUTH] Registered %s", email)
    return jsonify({"user": _profile(user)}), 201


# Login
@auth_bp.route("/login", methods=["POST"])
def login():
    _, email, password = _read_credentials()
    error = _credentials_error(email, password)
    if error:
        return jsonify({"message": error}), 400

    user = User.verify_password(email, password)
    if not user:
        return jsonify({"message": "Invalid email or password"}), 401

    # Save user info in session
    session["user_id"] = str(user["_id"])
    session["user_name"] = user["username"]
    return jsonify({"user": _profile(user)}), 200


# Logout
@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    return logout_user()


# View Profile
@auth_bp.route("/profile", methods=["GET"])
@login_required
def view_profile():
    user = User.find_by_id(current_user_id())
    if not user:
        session.clear()
        return jsonify({"message": "User not found"}), 404
    return jsonify({"user": _profile(user)}), 200
