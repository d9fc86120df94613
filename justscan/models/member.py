from justscan.utils.db import mongo, utcnow

ROLES = ("owner", "admin", "guard", "staff")


class OrganizationMember:

    @staticmethod
    def collection():
        return mongo.db.organization_members

    def __init__(self, user_id, organization_id, role="staff", permissions=None,
                 created_at=None):
        if role not in ROLES:
            raise ValueError(f"Unknown member role: {role}")
        self.user_id = user_id
        self.organization_id = organization_id
        self.role = role
        self.permissions = permissions or []
        self.created_at = created_at or utcnow()

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "organization_id": self.organization_id,
            "role": self.role,
            "permissions": self.permissions,
            "created_at": self.created_at
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())

    @staticmethod
    def find(organization_id, user_id):
        return OrganizationMember.collection().find_one({
            "organization_id": organization_id,
            "user_id": user_id
        })
