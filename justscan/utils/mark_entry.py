import logging

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from justscan.models.entry import Entry, STATUS_IN, STATUS_OUT
from justscan.models.student import Student
from justscan.utils.db import utcnow

logger = logging.getLogger(__name__)


class StudentNotFound(Exception):
    pass


# ============================
# MARK ENTRY
# ============================
def mark_entry_in_db(organization_id, roll_no, now=None):
    """
    Record one verified scan for a student of the organization.

    Returns (entry_type, entry, student):
      - "In"  when an open Out entry existed and has been closed
      - "Out" when a new Out entry has been created
    Raises StudentNotFound when the roll number is unknown in the organization.
    """
    student = Student.find_by_roll_no(organization_id, roll_no)
    if not student:
        raise StudentNotFound("Student not found in this organization")

    now = now or utcnow()

    # ---------------------------
    # OPEN ENTRY → CHECK-IN (returning)
    # ---------------------------
    entry = Entry.collection().find_one_and_update(
        {"student_id": student["_id"], "organization_id": organization_id, "status": STATUS_OUT},
        {"$set": {"status": STATUS_IN, "arrival_time": now, "updated_at": now}},
        return_document=ReturnDocument.AFTER
    )
    if entry:
        logger.info("[IN] %s (%s) returned", student["name"], student["roll_no"])
        return STATUS_IN, entry, student

    # ---------------------------
    # NO OPEN ENTRY → CHECK-OUT (leaving)
    # ---------------------------
    doc = Entry(student["_id"], organization_id, leaving_time=now, created_at=now, updated_at=now).to_dict()
    try:
        result = Entry.collection().insert_one(doc)
    except DuplicateKeyError:
        # A concurrent scan opened the entry first
        existing = Entry.collection().find_one(
            {"student_id": student["_id"], "organization_id": organization_id, "status": STATUS_OUT}
        )
        logger.info("[REPEAT] %s (%s) already out", student["name"], student["roll_no"])
        return STATUS_OUT, existing, student

    doc["_id"] = result.inserted_id
    logger.info("[OUT] %s (%s) left", student["name"], student["roll_no"])
    return STATUS_OUT, doc, student


def scan_message(entry_type, student):
    if entry_type == STATUS_IN:
        return f"Welcome back, {student['name']}!"
    return f"Goodbye, {student['name']}!"
