"""
justscan/utils/db.py
-----------------
This module initializes and manages the MongoDB connection
for the entire Flask application, plus small helpers shared by
the models and controllers.
"""

import logging
from datetime import datetime, timedelta, timezone

from bson import ObjectId
from bson.errors import InvalidId
from flask_pymongo import PyMongo

logger = logging.getLogger(__name__)

# Create a global MongoDB instance
mongo = PyMongo()


def init_db_connection(app):
    """
    Initialize MongoDB connection with Flask app.
    Loads settings from app.config (MONGO_URI, MONGO_CREATE_INDEXES).
    """
    mongo.init_app(app)
    logger.info("[DB] MongoDB connection initialized")

    if app.config.get("MONGO_CREATE_INDEXES"):
        ensure_indexes()
    return mongo


def ensure_indexes():
    db = mongo.db
    db.users.create_index("email", unique=True)
    db.students.create_index([("roll_no", 1), ("organization_id", 1)], unique=True)
    db.organization_members.create_index([("organization_id", 1), ("user_id", 1)], unique=True)
    # At most one open "Out" entry per student per organization
    db.entries.create_index(
        [("student_id", 1), ("organization_id", 1)],
        unique=True,
        partialFilterExpression={"status": "Out"},
        name="one_open_entry_per_student",
    )
    db.entries.create_index([("organization_id", 1), ("leaving_time", -1)])
    db.portal_sessions.create_index("expires_at", expireAfterSeconds=0)
    logger.info("[DB] Indexes ensured")


def utcnow():
    """Naive UTC timestamp, the form MongoDB hands back."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_day_bounds(offset_minutes, now=None):
    """Start/end (naive UTC) of the local calendar day containing now."""
    offset = timedelta(minutes=offset_minutes)
    local_now = (now or utcnow()) + offset
    start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1)
    return start - offset, end - offset


def to_object_id(value):
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def serialize_doc(value):
    """Convert ObjectIds and datetimes so a document can be returned as JSON."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize_doc(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_doc(v) for v in value]
    return value
