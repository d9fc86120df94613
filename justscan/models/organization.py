from werkzeug.security import generate_password_hash, check_password_hash

from justscan.utils.db import mongo, utcnow, to_object_id

MIN_VALIDATION_KEYWORDS = 6
DEFAULT_ROLL_NO_LENGTH = 5


class Organization:

    @staticmethod
    def collection():
        return mongo.db.organizations

    def __init__(self, name, access_code, created_by, validation_keywords=None,
                 roll_no_length=DEFAULT_ROLL_NO_LENGTH, is_active=True,
                 created_at=None, updated_at=None):
        self.name = name
        self.access_code_hash = generate_password_hash(access_code)
        self.created_by = created_by
        self.validation_keywords = validation_keywords or []
        self.roll_no_length = roll_no_length
        self.is_active = is_active
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or utcnow()

    @property
    def is_setup(self):
        return len(self.validation_keywords) >= MIN_VALIDATION_KEYWORDS

    def to_dict(self):
        return {
            "name": self.name,
            "access_code_hash": self.access_code_hash,
            "created_by": self.created_by,
            "validation_keywords": self.validation_keywords,
            "roll_no_length": self.roll_no_length,
            "is_setup": self.is_setup,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())

    @staticmethod
    def find_by_id(organization_id):
        oid = to_object_id(organization_id)
        if oid is None:
            return None
        return Organization.collection().find_one({"_id": oid})

    @staticmethod
    def verify_access_code(organization, access_code):
        return check_password_hash(organization["access_code_hash"], access_code or "")

    @staticmethod
    def is_owner(organization, user_id):
        return user_id is not None and str(organization.get("created_by")) == str(user_id)

    @staticmethod
    def public(organization):
        """Organization document without the access code hash."""
        return {k: v for k, v in organization.items() if k != "access_code_hash"}


def validate_settings(validation_keywords, roll_no_length):
    """
    Check a settings update. Returns (keywords, roll_no_length, error).
    Keywords are stripped and de-duplicated; 1-5 keywords is rejected.
    """
    keywords = None
    if validation_keywords is not None:
        if not isinstance(validation_keywords, list):
            return None, None, "validation_keywords must be a list."
        keywords = []
        for keyword in validation_keywords:
            keyword = str(keyword).strip()
            if keyword and keyword not in keywords:
                keywords.append(keyword)
        if len(keywords) < MIN_VALIDATION_KEYWORDS:
            return None, None, (
                f"At least {MIN_VALIDATION_KEYWORDS} validation keywords are required "
                f"for security. You provided {len(keywords)}."
            )

    length = None
    if roll_no_length is not None:
        try:
            length = int(roll_no_length)
        except (TypeError, ValueError):
            return None, None, "roll_no_length must be a positive integer."
        if length <= 0:
            return None, None, "roll_no_length must be a positive integer."

    return keywords, length, None
