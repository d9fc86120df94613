from datetime import timedelta

from justscan.utils.db import mongo, utcnow, to_object_id


class PortalSession:
    """Grants access to one organization's students and entries."""

    @staticmethod
    def collection():
        return mongo.db.portal_sessions

    def __init__(self, organization_id, user_id=None, hours=24, created_at=None):
        self.organization_id = organization_id
        self.user_id = user_id
        self.created_at = created_at or utcnow()
        self.expires_at = self.created_at + timedelta(hours=hours)

    def to_dict(self):
        return {
            "organization_id": self.organization_id,
            "user_id": self.user_id,
            "created_at": self.created_at,
            "expires_at": self.expires_at
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())

    @staticmethod
    def find_by_id(session_id):
        oid = to_object_id(session_id)
        if oid is None:
            return None
        return PortalSession.collection().find_one({"_id": oid})

    @staticmethod
    def is_expired(session, now=None):
        return session["expires_at"] < (now or utcnow())
