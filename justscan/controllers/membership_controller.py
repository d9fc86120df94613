import logging

from flask import Blueprint, jsonify, request

from justscan.models.member import OrganizationMember
from justscan.models.organization import Organization
from justscan.models.users import User
from justscan.utils.auth import current_user_id, login_required
from justscan.utils.db import serialize_doc, to_object_id

logger = logging.getLogger(__name__)

membership_bp = Blueprint("members", __name__, url_prefix="/api/organizations")


def _member_view(user, role, joined_at):
    return {
        "_id": user["_id"],
        "name": user.get("username"),
        "email": user.get("email"),
        "role": role,
        "joined_at": joined_at
    }


# -------------------------------------------------------------
# ADD MEMBER (owner only, by email)
# -------------------------------------------------------------
@membership_bp.route("/<organization_id>/members", methods=["POST"])
@login_required
def add_member(organization_id):
    organization = Organization.find_by_id(organization_id)
    if not organization:
        return jsonify({"message": "Organization not found"}), 404

    if not Organization.is_owner(organization, current_user_id()):
        return jsonify({"message": "Only the organization owner can add members"}), 403

    data = request.get_json(silent=True) or {}
    user_to_add = User.find_by_email(data.get("email"))
    if not user_to_add:
        return jsonify({"message": "There is no user at JustScan with this email"}), 404

    role = "owner" if Organization.is_owner(organization, user_to_add["_id"]) else "staff"
    existing = OrganizationMember.find(organization["_id"], user_to_add["_id"])

    try:
        if existing:
            # The creator keeps the owner role even if it was changed
            if role == "owner" and existing.get("role") != "owner":
                OrganizationMember.collection().update_one({"_id": existing["_id"]}, {"$set": {"role": "owner"}})
                return jsonify({
                    "message": "Owner role restored successfully",
                    "user": serialize_doc(_member_view(user_to_add, "owner", existing.get("created_at")))
                }), 200
            return jsonify({"message": "Already exist as member"}), 400

        member = OrganizationMember(user_to_add["_id"], organization["_id"], role=role)
        member.save()
        User.add_joined_org(user_to_add["_id"], organization["_id"])
    except Exception:
        logger.exception("[MEMBERS] Error adding member")
        return jsonify({"message": "Server error adding member"}), 500

    logger.info("[MEMBERS] %s joined %s as %s", user_to_add["email"], organization["name"], role)
    return jsonify({
        "message": "Member added successfully",
        "user": serialize_doc(_member_view(user_to_add, role, member.created_at))
    }), 200


# -------------------------------------------------------------
# REMOVE MEMBER (owner only, never the owner)
# -------------------------------------------------------------
@membership_bp.route("/<organization_id>/members/<member_id>", methods=["DELETE"])
@login_required
def remove_member(organization_id, member_id):
    organization = Organization.find_by_id(organization_id)
    if not organization:
        return jsonify({"message": "Organization not found"}), 404

    admin_id = current_user_id()
    if not Organization.is_owner(organization, admin_id):
        return jsonify({"message": "Only the organization owner can remove members"}), 403

    if member_id == str(admin_id):
        return jsonify({"message": "Cannot remove yourself. Delete organization instead."}), 400

    member_user = User.find_by_id(member_id)
    if not member_user:
        return jsonify({"message": "User not found"}), 404

    result = OrganizationMember.collection().delete_one({
        "organization_id": organization["_id"],
        "user_id": member_user["_id"]
    })
    if result.deleted_count == 0:
        return jsonify({"message": "Member not found in this organization"}), 404

    User.remove_joined_org(member_user["_id"], organization["_id"])
    return jsonify({"message": "Member removed successfully"}), 200


# -------------------------------------------------------------
# LIST MEMBERS (owner always first)
# -------------------------------------------------------------
@membership_bp.route("/<organization_id>/members", methods=["GET"])
@login_required
def get_organization_members(organization_id):
    organization = Organization.find_by_id(organization_id)
    if not organization:
        return jsonify({"message": "Organization not found"}), 404

    try:
        members = []
        for membership in OrganizationMember.collection().find({"organization_id": organization["_id"]}).sort("created_at", 1):
            user = User.find_by_id(membership["user_id"])
            if user:
                members.append(_member_view(user, membership.get("role"), membership.get("created_at")))

        creator = User.find_by_id(organization["created_by"])
        members = [m for m in members if not creator or m["_id"] != creator["_id"]]
        if creator:
            members.insert(0, _member_view(creator, "owner", organization.get("created_at")))

        return jsonify(serialize_doc(members)), 200
    except Exception:
        logger.exception("[MEMBERS] Error fetching members")
        return jsonify({"message": "Server error fetching members"}), 500


# -------------------------------------------------------------
# MEMBERSHIP CHECK FOR THE LOGGED-IN USER
# -------------------------------------------------------------
@membership_bp.route("/<organization_id>/membership", methods=["GET"])
@login_required
def check_membership(organization_id):
    organization_oid = to_object_id(organization_id)
    if organization_oid is None:
        return jsonify({"message": "Organization not found"}), 404

    user_id = current_user_id()
    is_member = OrganizationMember.find(organization_oid, user_id) is not None
    is_owner = Organization.collection().find_one({"_id": organization_oid, "created_by": user_id}) is not None
    return jsonify({"is_member": is_member or is_owner}), 200
