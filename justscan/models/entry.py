from justscan.utils.db import mongo, utcnow

STATUS_OUT = "Out"
STATUS_IN = "In"
DEFAULT_DESTINATION = "Una market"


class Entry:
    @staticmethod
    def collection():
        return mongo.db.entries

    def __init__(self, student_id, organization_id, destination=None, leaving_time=None,
                 arrival_time=None, status=None, created_at=None, updated_at=None):
        self.student_id = student_id
        self.organization_id = organization_id
        self.destination = destination or DEFAULT_DESTINATION
        self.leaving_time = leaving_time or utcnow()
        self.arrival_time = arrival_time
        self.status = status or STATUS_OUT  # Out | In
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or utcnow()

    def to_dict(self):
        return {
            "student_id": self.student_id,
            "organization_id": self.organization_id,
            "destination": self.destination,
            "leaving_time": self.leaving_time,
            "arrival_time": self.arrival_time,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def save(self):
        return Entry.collection().insert_one(self.to_dict())


"""
Lifecycle of one entry document:
    scan 1 -> {"status": "Out", "leaving_time": t1, "arrival_time": None}
    scan 2 -> {"status": "In",  "leaving_time": t1, "arrival_time": t2}
A student has at most one "Out" entry per organization at any time.
"""
