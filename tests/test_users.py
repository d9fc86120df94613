from conftest import create_organization, register


class TestRegister:

    def test_register_logs_in_and_hides_password(self, client, db):
        user = register(client, email="  Riya@Campus.EDU ")
        assert user["email"] == "riya@campus.edu"
        assert "password" not in user
        assert db.users.find_one({"email": "riya@campus.edu"})["password"] != "secret"

        profile = client.get("/api/users/profile")
        assert profile.status_code == 200
        assert profile.get_json()["user"]["email"] == "riya@campus.edu"

    def test_duplicate_email_rejected(self, client):
        register(client)
        response = client.post("/api/users/register", json={"email": "owner@campus.edu", "password": "other"})
        assert response.status_code == 400
        assert response.get_json()["message"] == "Email already registered"

    def test_short_password_rejected(self, client):
        response = client.post("/api/users/register", json={"email": "a@b.com", "password": "abc"})
        assert response.status_code == 400

    def test_invalid_email_rejected(self, client):
        response = client.post("/api/users/register", json={"email": "not-an-email", "password": "secret"})
        assert response.status_code == 400


class TestLogin:

    def test_login_with_correct_password(self, client):
        register(client)
        client.post("/api/users/logout")

        response = client.post("/api/users/login", json={"email": "OWNER@campus.edu", "password": "secret"})
        assert response.status_code == 200
        assert response.get_json()["user"]["username"] == "owner"

    def test_login_with_wrong_password(self, client):
        register(client)
        client.post("/api/users/logout")

        response = client.post("/api/users/login", json={"email": "owner@campus.edu", "password": "wrong"})
        assert response.status_code == 401

    def test_logout_clears_session(self, client):
        register(client)
        assert client.post("/api/users/logout").status_code == 200
        response = client.get("/api/users/profile")
        assert response.status_code == 401
        assert response.get_json()["message"] == "Please log in to access this resource."


def test_profile_lists_created_organizations(client):
    register(client)
    organization = create_organization(client, name="North Gate")

    user = client.get("/api/users/profile").get_json()["user"]
    assert user["created_orgs"] == [{"_id": organization["_id"], "name": "North Gate"}]
    assert user["joined_orgs"] == [{"_id": organization["_id"], "name": "North Gate"}]
