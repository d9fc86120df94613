import mongomock
import pytest

from justscan.app import create_app
from justscan.config import TestConfig
from justscan.utils.auth import PORTAL_SESSION_HEADER
from justscan.utils.db import mongo

ACCESS_CODE = "gate-1234"
KEYWORDS = ["College", "Valid", "Institute", "Technology", "Student", "Identity"]


@pytest.fixture
def app():
    app = create_app(TestConfig)
    # Replace the real database with an in-memory one
    mongo.db = mongomock.MongoClient().db
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return mongo.db


def register(client, email="owner@campus.edu", password="secret", username=None):
    response = client.post("/api/users/register", json={
        "email": email,
        "password": password,
        "username": username or email.split("@")[0]
    })
    assert response.status_code == 201, response.get_json()
    return response.get_json()["user"]


def create_organization(client, name="Hill Campus", access_code=ACCESS_CODE):
    response = client.post("/api/organizations/create", json={"name": name, "access_code": access_code})
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def open_portal(client, organization_id, access_code=ACCESS_CODE):
    response = client.post("/api/organizations/verify", json={
        "organization_id": organization_id,
        "access_code": access_code
    })
    assert response.status_code == 200, response.get_json()
    return {PORTAL_SESSION_HEADER: response.get_json()["session_id"]}


def add_student(client, headers, roll_no="12345", name="Sahil Kumar", **extra):
    body = {"roll_no": roll_no, "name": name, "email": f"{roll_no}@campus.edu"}
    body.update(extra)
    response = client.post("/api/students", json=body, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


@pytest.fixture
def owner(client):
    """Logged-in owner with an organization and an open portal session."""
    user = register(client)
    organization = create_organization(client)
    headers = open_portal(client, organization["_id"])
    return {"user": user, "organization": organization, "headers": headers}
