import re

from justscan.utils.db import mongo

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Student:

    @staticmethod
    def collection():
        return mongo.db.students

    def __init__(self, roll_no, name, email, organization_id, mobile_no=None,
                 hostel_name=None, room_no=None):
        self.roll_no = str(roll_no).strip()
        self.name = name.strip()
        self.email = email.strip()
        self.organization_id = organization_id
        self.mobile_no = mobile_no
        self.hostel_name = hostel_name or ""
        self.room_no = room_no or ""

    def to_dict(self):
        return {
            "roll_no": self.roll_no,
            "name": self.name,
            "email": self.email,
            "mobile_no": self.mobile_no,
            "hostel_name": self.hostel_name,
            "room_no": self.room_no,
            "organization_id": self.organization_id
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())

    @staticmethod
    def find_by_roll_no(organization_id, roll_no):
        return Student.collection().find_one({
            "roll_no": str(roll_no).strip(),
            "organization_id": organization_id
        })

    @staticmethod
    def roster(organization_id):
        """[{roll_no, name}] for every student of the organization."""
        cursor = Student.collection().find(
            {"organization_id": organization_id},
            {"roll_no": 1, "name": 1, "_id": 0}
        )
        return [{"roll_no": str(s["roll_no"]), "name": s["name"]} for s in cursor]


def validate_student(data, partial=False):
    """
    Validate student fields from a request body or an Excel row.
    Returns an error message, or None when the data is acceptable.
    """
    required = ("roll_no", "name", "email")
    if not partial:
        for field in required:
            if not str(data.get(field) or "").strip():
                return f"{field} is required."

    if "roll_no" in data:
        roll_no = str(data.get("roll_no") or "").strip()
        if not roll_no.isdigit():
            return "Roll number must contain digits only."

    if "name" in data and not str(data.get("name") or "").strip():
        return "name is required."

    if "email" in data:
        email = str(data.get("email") or "").strip()
        if not EMAIL_PATTERN.match(email):
            return "Email must be a valid email address."

    mobile = data.get("mobile_no")
    if mobile not in (None, ""):
        mobile = str(mobile).strip()
        if not (mobile.isdigit() and len(mobile) == 10):
            return "Mobile number must be exactly 10 digits long."

    return None
