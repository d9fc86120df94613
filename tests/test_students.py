import io

from openpyxl import Workbook

from conftest import add_student, open_portal, register


def _xlsx(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer


class TestStudentCrud:

    def test_add_and_fetch(self, client, owner):
        add_student(client, owner["headers"], mobile_no="9876543210", hostel_name="Block A", room_no=101)

        student = client.get("/api/students/12345", headers=owner["headers"]).get_json()
        assert student["name"] == "Sahil Kumar"
        assert student["room_no"] == "101"
        assert student["mobile_no"] == "9876543210"

    def test_duplicate_roll_no(self, client, owner):
        add_student(client, owner["headers"])
        response = client.post("/api/students", headers=owner["headers"], json={
            "roll_no": "12345", "name": "Other", "email": "other@campus.edu"
        })
        assert response.status_code == 400
        assert response.get_json()["message"] == "Student with this Roll No already exists in this organization"

    def test_validation(self, client, owner):
        bad_roll = client.post("/api/students", headers=owner["headers"], json={
            "roll_no": "12A45", "name": "X", "email": "x@campus.edu"
        })
        bad_mobile = client.post("/api/students", headers=owner["headers"], json={
            "roll_no": "12345", "name": "X", "email": "x@campus.edu", "mobile_no": "12345"
        })
        assert bad_roll.status_code == 400
        assert bad_mobile.status_code == 400

    def test_list_sorted_and_roster(self, client, owner):
        add_student(client, owner["headers"], roll_no="22222", name="Beta")
        add_student(client, owner["headers"], roll_no="11111", name="Alpha")

        students = client.get("/api/students", headers=owner["headers"]).get_json()
        assert [s["roll_no"] for s in students] == ["11111", "22222"]

        roster = client.get("/api/students/roll-numbers", headers=owner["headers"]).get_json()
        assert sorted(roster, key=lambda s: s["roll_no"]) == [
            {"roll_no": "11111", "name": "Alpha"},
            {"roll_no": "22222", "name": "Beta"},
        ]

    def test_update_and_delete(self, client, owner):
        add_student(client, owner["headers"])
        response = client.put("/api/students/12345", headers=owner["headers"], json={"hostel_name": "Block C"})
        assert response.status_code == 200
        assert response.get_json()["hostel_name"] == "Block C"

        deleted = client.delete("/api/students/12345", headers=owner["headers"])
        assert deleted.get_json()["message"] == "Student deleted successfully"
        assert client.get("/api/students/12345", headers=owner["headers"]).status_code == 404
        assert client.delete("/api/students/12345", headers=owner["headers"]).status_code == 404

    def test_staff_cannot_add(self, client, owner):
        client.post("/api/users/logout")
        register(client, email="guard@campus.edu")
        headers = open_portal(client, owner["organization"]["_id"])

        response = client.post("/api/students", headers=headers, json={
            "roll_no": "12345", "name": "X", "email": "x@campus.edu"
        })
        assert response.status_code == 403
        # staff can still read the roster
        assert client.get("/api/students/roll-numbers", headers=headers).status_code == 200


class TestBulkUpload:

    def _upload(self, client, headers, buffer):
        return client.post(
            "/api/students/bulk-upload",
            headers=headers,
            data={"file": (buffer, "students.xlsx")},
            content_type="multipart/form-data"
        )

    def test_counts_added_skipped_failed(self, client, owner):
        add_student(client, owner["headers"], roll_no="10001", name="Existing")
        buffer = _xlsx([
            ["Name", "Roll No", "Email", "Mobile", "Hostel", "Room"],
            ["Asha", 10002, "asha@campus.edu", 9876543210, "Block A", 12],
            ["Existing Again", 10001, "e@campus.edu", None, None, None],
            ["Asha Twin", 10002, "twin@campus.edu", None, None, None],
            [None, 10003, "noname@campus.edu", None, None, None],
            ["Bad Mobile", 10004, "bad@campus.edu", 123, None, None],
        ])

        body = self._upload(client, owner["headers"], buffer).get_json()
        assert body["addedCount"] == 1
        assert body["skippedCount"] == 2
        assert body["failedCount"] == 2
        assert body["errors"][0] == {"row": 5, "name": "Unknown", "error": "Missing Name or Roll No"}

        asha = client.get("/api/students/10002", headers=owner["headers"]).get_json()
        assert asha["mobile_no"] == "9876543210"
        assert asha["room_no"] == "12"

    def test_no_file(self, client, owner):
        response = client.post("/api/students/bulk-upload", headers=owner["headers"], data={},
                               content_type="multipart/form-data")
        assert response.status_code == 400
        assert response.get_json()["message"] == "No file uploaded"

    def test_empty_sheet(self, client, owner):
        response = self._upload(client, owner["headers"], _xlsx([["Name", "Roll No", "Email"]]))
        assert response.status_code == 400
        assert response.get_json()["message"] == "Excel sheet is empty"
