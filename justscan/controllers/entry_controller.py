import logging
import re
from datetime import datetime, timedelta

from flask import Blueprint, current_app, g, jsonify, request, send_file

from justscan.models.entry import Entry, STATUS_OUT
from justscan.models.student import Student
from justscan.utils.auth import portal_session_required
from justscan.utils.db import local_day_bounds, serialize_doc
from justscan.utils.mailer import reminder_body, send_mail
from justscan.utils.mark_entry import StudentNotFound, mark_entry_in_db, scan_message
from justscan.utils.reports import EXPORTS, build_csv, build_excel, build_pdf

logger = logging.getLogger(__name__)

entry_bp = Blueprint("entries", __name__, url_prefix="/api/entries")

DEFAULT_LIMIT = 100


# ==========================================================
# SCAN (create Out entry or close it as In)
# ==========================================================
@entry_bp.route("/scan", methods=["POST"])
@portal_session_required
def scan_entry():
    data = request.get_json(silent=True) or {}
    roll_no = str(data.get("roll_no") or "").strip()
    if not roll_no:
        return jsonify({"message": "roll_no is required"}), 400

    try:
        entry_type, entry, student = mark_entry_in_db(g.organization["_id"], roll_no)
    except StudentNotFound as e:
        return jsonify({"message": str(e)}), 404
    except Exception:
        logger.exception("[SCAN] Error processing scan for %s", roll_no)
        return jsonify({"message": "Error processing scan"}), 500

    status_code = 201 if entry_type == STATUS_OUT else 200
    return jsonify({
        "message": scan_message(entry_type, student),
        "type": entry_type,
        "entry": serialize_doc(entry),
        "student": serialize_doc(student)
    }), status_code


# ==========================================================
# ENTRY HISTORY
# ==========================================================
def _parse_date(value):
    return datetime.strptime(value, "%Y-%m-%d")


def query_entries(organization_id, args):
    """
    Build and run the history pipeline for the organization.
    Supported args: date=today | startDate/endDate (YYYY-MM-DD), search, limit.
    Raises ValueError on malformed dates or limit.
    """
    pipeline = [{"$match": {"organization_id": organization_id}}]

    offset = current_app.config.get("LOCAL_UTC_OFFSET_MINUTES", 0)
    if args.get("date") == "today":
        start, end = local_day_bounds(offset)
        pipeline.append({"$match": {"leaving_time": {"$gte": start, "$lt": end}}})
    elif args.get("startDate") or args.get("endDate"):
        date_filter = {}
        if args.get("startDate"):
            date_filter["$gte"] = _parse_date(args["startDate"]) - timedelta(minutes=offset)
        if args.get("endDate"):
            date_filter["$lt"] = _parse_date(args["endDate"]) + timedelta(days=1) - timedelta(minutes=offset)
        pipeline.append({"$match": {"leaving_time": date_filter}})

    pipeline.append({
        "$lookup": {
            "from": "students",
            "localField": "student_id",
            "foreignField": "_id",
            "as": "student"
        }
    })
    pipeline.append({"$unwind": {"path": "$student", "preserveNullAndEmptyArrays": True}})

    search = (args.get("search") or "").strip()
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        pipeline.append({"$match": {"$or": [{"student.name": pattern}, {"student.roll_no": pattern}]}})

    limit = int(args.get("limit") or DEFAULT_LIMIT)
    if limit <= 0:
        raise ValueError("limit must be positive")

    pipeline.append({"$sort": {"leaving_time": -1}})
    pipeline.append({"$limit": limit})
    return list(Entry.collection().aggregate(pipeline))


@entry_bp.route("", methods=["GET"])
@portal_session_required
def get_entries():
    try:
        entries = query_entries(g.organization["_id"], request.args)
    except ValueError as e:
        return jsonify({"message": f"Invalid filter: {e}"}), 400
    except Exception:
        logger.exception("[ENTRIES] Error fetching entries")
        return jsonify({"message": "Error fetching entries"}), 500
    return jsonify(serialize_doc(entries)), 200


# ==========================================================
# EXPORT HISTORY (csv | excel | pdf)
# ==========================================================
@entry_bp.route("/export/<fmt>", methods=["GET"])
@portal_session_required
def export_entries(fmt):
    if fmt not in EXPORTS:
        return jsonify({"message": f"Unsupported export format: {fmt}"}), 400

    try:
        entries = query_entries(g.organization["_id"], request.args)
    except ValueError as e:
        return jsonify({"message": f"Invalid filter: {e}"}), 400

    if fmt == "csv":
        output = build_csv(entries)
    elif fmt == "excel":
        output = build_excel(entries)
    else:
        output = build_pdf(entries, g.organization.get("name", ""))

    mimetype, filename = EXPORTS[fmt]
    return send_file(output, mimetype=mimetype, as_attachment=True, download_name=filename)


# ==========================================================
# REMINDERS FOR STUDENTS STILL OUT TODAY
# ==========================================================
@entry_bp.route("/send-reminders", methods=["POST"])
@portal_session_required
def send_reminders():
    organization = g.organization
    start, end = local_day_bounds(current_app.config.get("LOCAL_UTC_OFFSET_MINUTES", 0))

    try:
        unreturned = list(Entry.collection().find({
            "organization_id": organization["_id"],
            "status": STATUS_OUT,
            "leaving_time": {"$gte": start, "$lt": end}
        }))
    except Exception:
        logger.exception("[REMINDERS] Error loading unreturned entries")
        return jsonify({"message": "Error sending reminders"}), 500

    if not unreturned:
        return jsonify({"message": "No unreturned students found for today.", "count": 0}), 200

    success, failed, students = 0, 0, []
    for entry in unreturned:
        student = Student.collection().find_one({"_id": entry["student_id"]})
        if not student:
            failed += 1
            continue

        students.append({"name": student["name"], "roll_no": student["roll_no"], "email": student["email"]})
        try:
            sent = send_mail(
                student["email"],
                f"Return reminder - {organization['name']}",
                reminder_body(student["name"], organization["name"], entry.get("leaving_time"))
            )
        except Exception as e:
            logger.error("[REMINDERS] Failed to send email to %s: %s", student["email"], e)
            sent = False

        if sent:
            success += 1
        else:
            failed += 1

    return jsonify({
        "message": f"Reminders sent successfully to {success} student(s).",
        "total": len(unreturned),
        "success": success,
        "failed": failed,
        "students": students
    }), 200
