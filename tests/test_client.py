from unittest.mock import MagicMock

import pytest
import requests

from justscan.scanner.client import AttendanceClient, AttendanceError
from justscan.utils.auth import PORTAL_SESSION_HEADER


def _response(status_code, body):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = body
    return response


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def client(http):
    return AttendanceClient("http://gate.local:3000/", http=http)


def test_open_portal_stores_session_header(client, http):
    http.request.return_value = _response(200, {
        "message": "Access granted",
        "session_id": "abc123",
        "organization": {"_id": "org1", "name": "Hill Campus"}
    })
    client.open_portal("org1", "gate-1234")
    assert client.portal_session_id == "abc123"
    assert client.organization_id == "org1"

    http.request.return_value = _response(200, [{"roll_no": "12345", "name": "Sahil Kumar"}])
    assert client.fetch_roster() == [{"roll_no": "12345", "name": "Sahil Kumar"}]

    method, url = http.request.call_args[0]
    assert (method, url) == ("GET", "http://gate.local:3000/api/students/roll-numbers")
    assert http.request.call_args[1]["headers"] == {PORTAL_SESSION_HEADER: "abc123"}


def test_record_scan_posts_roll_no(client, http):
    http.request.return_value = _response(201, {"message": "Goodbye, Sahil Kumar!", "type": "Out"})
    assert client.record_scan("12345")["type"] == "Out"
    assert http.request.call_args[1]["json"] == {"roll_no": "12345"}


def test_server_message_becomes_error(client, http):
    http.request.return_value = _response(404, {"message": "Student not found in this organization"})
    with pytest.raises(AttendanceError) as error:
        client.record_scan("99999")
    assert str(error.value) == "Student not found in this organization"
    assert error.value.status_code == 404


def test_non_json_error_body(client, http):
    response = _response(502, None)
    response.json.side_effect = ValueError("no json")
    http.request.return_value = response
    with pytest.raises(AttendanceError, match="status 502"):
        client.fetch_organization()


def test_network_error(client, http):
    http.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(AttendanceError, match="Network error"):
        client.record_scan("12345")
