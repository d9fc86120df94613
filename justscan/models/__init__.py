# models/__init__.py

from .users import User
from .organization import Organization
from .member import OrganizationMember
from .portal_session import PortalSession
from .student import Student
from .entry import Entry

__all__ = [
    "User",
    "Organization",
    "OrganizationMember",
    "PortalSession",
    "Student",
    "Entry"
]
