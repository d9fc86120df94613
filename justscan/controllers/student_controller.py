import io
import logging

from flask import Blueprint, g, jsonify, request
from openpyxl import load_workbook
from pymongo.errors import DuplicateKeyError

from justscan.models.student import Student, validate_student
from justscan.utils.auth import is_portal_owner, portal_session_required
from justscan.utils.db import serialize_doc

logger = logging.getLogger(__name__)

student_bp = Blueprint("students", __name__, url_prefix="/api/students")

EDITABLE_FIELDS = ("name", "email", "mobile_no", "hostel_name", "room_no")

# Accepted spreadsheet headers (lower-cased) for each student field
BULK_HEADERS = {
    "name": ("name",),
    "roll_no": ("roll no", "roll_no", "rollno"),
    "email": ("email",),
    "mobile_no": ("mobile", "phone", "mobile no"),
    "hostel_name": ("hostel",),
    "room_no": ("room", "room no"),
}


def _cell_str(value):
    if value is None:
        return ""
    # Excel hands back whole numbers as floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


# -------------------------------------------------------------
# ROSTER FOR THE SCANNER
# -------------------------------------------------------------
@student_bp.route("/roll-numbers", methods=["GET"])
@portal_session_required
def get_roll_numbers():
    try:
        return jsonify(Student.roster(g.organization["_id"])), 200
    except Exception:
        logger.exception("[STUDENTS] Error fetching roll numbers")
        return jsonify({"message": "Error fetching roll numbers"}), 500


# -------------------------------------------------------------
# VIEW STUDENTS
# -------------------------------------------------------------
@student_bp.route("", methods=["GET"])
@portal_session_required
def get_students():
    try:
        students = list(Student.collection().find({"organization_id": g.organization["_id"]}).sort("roll_no", 1))
        return jsonify(serialize_doc(students)), 200
    except Exception:
        logger.exception("[STUDENTS] Error fetching students")
        return jsonify({"message": "Error fetching students"}), 500


@student_bp.route("/<roll_no>", methods=["GET"])
@portal_session_required
def get_student(roll_no):
    student = Student.find_by_roll_no(g.organization["_id"], roll_no)
    if not student:
        return jsonify({"message": "Student not found"}), 404
    return jsonify(serialize_doc(student)), 200


# -------------------------------------------------------------
# ADD STUDENT
# -------------------------------------------------------------
@student_bp.route("", methods=["POST"])
@portal_session_required
def create_student():
    if not is_portal_owner():
        return jsonify({"message": "Only the organization owner can add students"}), 403

    data = request.get_json(silent=True) or {}
    error = validate_student(data)
    if error:
        return jsonify({"message": error}), 400

    organization_id = g.organization["_id"]
    if Student.find_by_roll_no(organization_id, data["roll_no"]):
        return jsonify({"message": "Student with this Roll No already exists in this organization"}), 400

    student = Student(
        roll_no=data["roll_no"],
        name=str(data["name"]),
        email=str(data["email"]),
        organization_id=organization_id,
        mobile_no=_cell_str(data.get("mobile_no")) or None,
        hostel_name=data.get("hostel_name"),
        room_no=_cell_str(data.get("room_no"))
    ).to_dict()

    try:
        result = Student.collection().insert_one(student)
    except DuplicateKeyError:
        return jsonify({"message": "Student with this Roll No already exists in this organization"}), 400
    except Exception as e:
        logger.exception("[STUDENTS] Error adding student")
        return jsonify({"message": str(e)}), 500

    student["_id"] = result.inserted_id
    logger.info("[STUDENTS] Added %s (%s)", student["name"], student["roll_no"])
    return jsonify(serialize_doc(student)), 201


# -------------------------------------------------------------
# BULK UPLOAD (first sheet of an .xlsx file)
# -------------------------------------------------------------
def _read_rows(file_storage):
    workbook = load_workbook(io.BytesIO(file_storage.read()), read_only=True, data_only=True)
    sheet = workbook.worksheets[0]
    rows = sheet.iter_rows(values_only=True)
    header = next(rows, None)
    if not header:
        return []

    columns = {}
    for index, title in enumerate(header):
        title = _cell_str(title).lower()
        for field, aliases in BULK_HEADERS.items():
            if title in aliases and field not in columns:
                columns[field] = index

    records = []
    for row in rows:
        if row is None or all(cell is None for cell in row):
            continue
        records.append({
            field: _cell_str(row[index]) if index < len(row) else ""
            for field, index in columns.items()
        })
    return records


@student_bp.route("/bulk-upload", methods=["POST"])
@portal_session_required
def bulk_upload_students():
    if not is_portal_owner():
        return jsonify({"message": "Only the organization owner can upload students"}), 403

    upload = request.files.get("file")
    if not upload:
        return jsonify({"message": "No file uploaded"}), 400

    try:
        records = _read_rows(upload)
    except Exception as e:
        logger.warning("[STUDENTS] Unreadable upload: %s", e)
        return jsonify({"message": "Could not read the Excel file"}), 400

    if not records:
        return jsonify({"message": "Excel sheet is empty"}), 400

    organization_id = g.organization["_id"]
    existing = {
        str(s["roll_no"]).lower()
        for s in Student.collection().find({"organization_id": organization_id}, {"roll_no": 1})
    }
    seen_in_batch = set()
    added, skipped, failed = 0, 0, 0
    errors = []

    for i, record in enumerate(records):
        row_number = i + 2  # header is row 1
        name = record.get("name", "")
        roll_no = record.get("roll_no", "")

        if not name or not roll_no:
            errors.append({"row": row_number, "name": name or "Unknown", "error": "Missing Name or Roll No"})
            failed += 1
            continue

        key = roll_no.lower()
        if key in existing or key in seen_in_batch:
            skipped += 1
            continue
        seen_in_batch.add(key)

        error = validate_student(record)
        if error:
            errors.append({"row": row_number, "name": name, "error": error})
            failed += 1
            continue

        try:
            Student(
                roll_no=roll_no,
                name=name,
                email=record.get("email", ""),
                organization_id=organization_id,
                mobile_no=record.get("mobile_no") or None,
                hostel_name=record.get("hostel_name"),
                room_no=record.get("room_no")
            ).save()
            added += 1
        except Exception as e:
            errors.append({"row": row_number, "name": name, "error": str(e)})
            failed += 1

    logger.info("[STUDENTS] Bulk upload: %d added, %d skipped, %d failed", added, skipped, failed)
    return jsonify({
        "message": "Bulk upload processing complete",
        "addedCount": added,
        "skippedCount": skipped,
        "failedCount": failed,
        "errors": errors
    }), 200


# -------------------------------------------------------------
# UPDATE STUDENT
# -------------------------------------------------------------
@student_bp.route("/<roll_no>", methods=["PUT"])
@portal_session_required
def update_student(roll_no):
    if not is_portal_owner():
        return jsonify({"message": "Only the organization owner can edit students"}), 403

    data = request.get_json(silent=True) or {}
    updates = {field: data[field] for field in EDITABLE_FIELDS if field in data}
    error = validate_student(updates, partial=True)
    if error:
        return jsonify({"message": error}), 400
    if "mobile_no" in updates:
        updates["mobile_no"] = _cell_str(updates["mobile_no"]) or None

    student = Student.find_by_roll_no(g.organization["_id"], roll_no)
    if not student:
        return jsonify({"message": "Student not found"}), 404

    if updates:
        Student.collection().update_one({"_id": student["_id"]}, {"$set": updates})
        student.update(updates)
    return jsonify(serialize_doc(student)), 200


# -------------------------------------------------------------
# DELETE STUDENT
# -------------------------------------------------------------
@student_bp.route("/<roll_no>", methods=["DELETE"])
@portal_session_required
def delete_student(roll_no):
    if not is_portal_owner():
        return jsonify({"message": "Only the organization owner can delete students"}), 403

    try:
        result = Student.collection().delete_one({
            "roll_no": str(roll_no).strip(),
            "organization_id": g.organization["_id"]
        })
    except Exception:
        logger.exception("[STUDENTS] Error deleting student %s", roll_no)
        return jsonify({"message": "Error deleting student"}), 500

    if result.deleted_count == 0:
        return jsonify({"message": "Student not found"}), 404
    return jsonify({"message": "Student deleted successfully"}), 200
