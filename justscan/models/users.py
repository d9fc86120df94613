from werkzeug.security import generate_password_hash, check_password_hash

from justscan.utils.db import mongo, utcnow, to_object_id


class User:

    @staticmethod
    def collection():
        return mongo.db.users

    def __init__(self, username, email, password, created_orgs=None, joined_orgs=None,
                 created_at=None, updated_at=None):
        self.username = username
        self.email = email
        self.password = generate_password_hash(password)
        self.created_orgs = created_orgs or []
        self.joined_orgs = joined_orgs or []
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or utcnow()

    # Convert to dictionary for MongoDB
    def to_dict(self):
        return {
            "username": self.username,
            "email": self.email,
            "password": self.password,
            "created_orgs": self.created_orgs,
            "joined_orgs": self.joined_orgs,
            "created_at": self.created_at,
            "updated_at": self.updated_at
        }

    # Save new user
    def save(self):
        return self.collection().insert_one(self.to_dict())

    # Find user by ID
    @staticmethod
    def find_by_id(user_id):
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return User.collection().find_one({"_id": oid})

    # Find user by email
    @staticmethod
    def find_by_email(email):
        return User.collection().find_one({"email": (email or "").strip().lower()})

    # Verify password
    @staticmethod
    def verify_password(email, password):
        user = User.find_by_email(email)
        if user and check_password_hash(user["password"], password or ""):
            return user
        return None

    # Keep the user's organization lists in sync with memberships
    @staticmethod
    def add_joined_org(user_id, organization_id, created=False):
        fields = {"joined_orgs": organization_id}
        if created:
            fields["created_orgs"] = organization_id
        return User.collection().update_one(
            {"_id": user_id},
            {"$addToSet": fields, "$set": {"updated_at": utcnow()}}
        )

    @staticmethod
    def remove_joined_org(user_id, organization_id):
        return User.collection().update_one(
            {"_id": user_id},
            {"$pull": {"joined_orgs": organization_id}, "$set": {"updated_at": utcnow()}}
        )

    @staticmethod
    def public(user):
        """User document without the password hash."""
        return {k: v for k, v in user.items() if k != "password"}
