import logging

from flask import Blueprint, g, jsonify, request

from justscan.models.member import OrganizationMember
from justscan.models.organization import Organization, validate_settings
from justscan.models.portal_session import PortalSession
from justscan.models.users import User
from justscan.utils.auth import current_user_id, login_required, portal_session_hours, portal_session_required
from justscan.utils.db import serialize_doc, utcnow

logger = logging.getLogger(__name__)

organization_bp = Blueprint("organizations", __name__, url_prefix="/api/organizations")

DETAIL_FIELDS = ("_id", "name", "validation_keywords", "is_active", "is_setup", "roll_no_length", "created_by")


# -----------------------------
# LIST ACTIVE ORGANIZATIONS
# -----------------------------
@organization_bp.route("", methods=["GET"])
def get_all_organizations():
    try:
        organizations = list(Organization.collection().find({"is_active": True}, {"name": 1}).sort("name", 1))
        return jsonify(serialize_doc(organizations)), 200
    except Exception:
        logger.exception("[ORG] Error fetching organizations")
        return jsonify({"message": "Server error fetching organizations"}), 500


# -----------------------------
# CREATE ORGANIZATION
# -----------------------------
@organization_bp.route("/create", methods=["POST"])
@login_required
def create_organization():
    data = request.get_json(silent=True) or {}
    name = str(data.get("name") or "").strip()
    access_code = str(data.get("access_code") or "")

    if not name or not access_code:
        return jsonify({"message": "Organization name and access code are required."}), 400

    user_id = current_user_id()
    try:
        organization = Organization(name=name, access_code=access_code, created_by=user_id).to_dict()
        result = Organization.collection().insert_one(organization)
        organization["_id"] = result.inserted_id

        OrganizationMember(user_id, organization["_id"], role="owner").save()
        User.add_joined_org(user_id, organization["_id"], created=True)
    except Exception as e:
        logger.exception("[ORG] Error creating organization")
        return jsonify({"message": str(e)}), 500

    logger.info("[ORG] Created %s", name)
    return jsonify(serialize_doc(Organization.public(organization))), 201


# -----------------------------
# ORGANIZATIONS OF THE LOGGED-IN USER
# -----------------------------
@organization_bp.route("/my-organizations", methods=["GET"])
@login_required
def get_user_organizations():
    user_id = current_user_id()
    try:
        organizations = {}
        for org in Organization.collection().find({"created_by": user_id}):
            organizations[org["_id"]] = dict(Organization.public(org), role="owner")

        for membership in OrganizationMember.collection().find({"user_id": user_id}):
            if membership["organization_id"] in organizations:
                continue
            org = Organization.find_by_id(membership["organization_id"])
            if org:
                organizations[org["_id"]] = dict(Organization.public(org), role=membership.get("role", "staff"))

        return jsonify(serialize_doc(list(organizations.values()))), 200
    except Exception:
        logger.exception("[ORG] Error fetching user organizations")
        return jsonify({"message": "Server error fetching your organizations"}), 500


# -----------------------------
# SCAN SETTINGS FOR THE PORTAL SESSION
# -----------------------------
@organization_bp.route("/current", methods=["GET"])
@portal_session_required
def get_current_organization():
    return jsonify(serialize_doc({k: g.organization.get(k) for k in DETAIL_FIELDS})), 200


# -----------------------------
# ORGANIZATION DETAILS
# -----------------------------
@organization_bp.route("/<organization_id>", methods=["GET"])
@login_required
def get_organization(organization_id):
    organization = Organization.find_by_id(organization_id)
    if not organization:
        return jsonify({"message": "Organization not found"}), 404
    return jsonify(serialize_doc({k: organization.get(k) for k in DETAIL_FIELDS})), 200


# -----------------------------
# VERIFY ACCESS CODE → PORTAL SESSION
# -----------------------------
@organization_bp.route("/verify", methods=["POST"])
def verify_access_code():
    data = request.get_json(silent=True) or {}
    organization = Organization.find_by_id(data.get("organization_id"))
    if not organization:
        return jsonify({"message": "Organization not found"}), 404

    if not Organization.verify_access_code(organization, data.get("access_code")):
        return jsonify({"message": "Invalid access code"}), 401

    user_id = current_user_id()
    try:
        # Logged-in users join the organization as staff
        if user_id and not OrganizationMember.find(organization["_id"], user_id):
            role = "owner" if Organization.is_owner(organization, user_id) else "staff"
            OrganizationMember(user_id, organization["_id"], role=role).save()
        if user_id:
            User.add_joined_org(user_id, organization["_id"])

        portal_session = PortalSession(organization["_id"], user_id=user_id, hours=portal_session_hours()).to_dict()
        result = PortalSession.collection().insert_one(portal_session)
    except Exception:
        logger.exception("[ORG] Error verifying access code")
        return jsonify({"message": "Server error verifying code"}), 500

    return jsonify({
        "message": "Access granted",
        "session_id": str(result.inserted_id),
        "expires_at": portal_session["expires_at"].isoformat(),
        "organization": {"_id": str(organization["_id"]), "name": organization["name"]}
    }), 200


# -----------------------------
# UPDATE SCAN SETTINGS (keywords + roll number length)
# -----------------------------
@organization_bp.route("/<organization_id>/settings", methods=["PUT"])
@login_required
def update_organization_settings(organization_id):
    organization = Organization.find_by_id(organization_id)
    if not organization:
        return jsonify({"message": "Organization not found"}), 404

    if not Organization.is_owner(organization, current_user_id()):
        return jsonify({"message": "Only the organization owner can change settings"}), 403

    data = request.get_json(silent=True) or {}
    keywords, roll_no_length, error = validate_settings(
        data.get("validation_keywords"), data.get("roll_no_length")
    )
    if error:
        return jsonify({"message": error}), 400

    updates = {"updated_at": utcnow()}
    if keywords is not None:
        updates["validation_keywords"] = keywords
        updates["is_setup"] = True
    if roll_no_length is not None:
        updates["roll_no_length"] = roll_no_length

    Organization.collection().update_one({"_id": organization["_id"]}, {"$set": updates})
    organization.update(updates)
    logger.info("[ORG] Settings updated for %s", organization["name"])
    return jsonify(serialize_doc(Organization.public(organization))), 200