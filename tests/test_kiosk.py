from unittest.mock import MagicMock, patch

from justscan.scanner.client import AttendanceError
from justscan.scanner.kiosk import load_session, main, parse_args
from justscan.scanner.session import ScanState


def test_load_session_reads_settings_once():
    client = MagicMock()
    client.fetch_organization.return_value = {"validation_keywords": [], "roll_no_length": 5}
    client.fetch_roster.return_value = [{"roll_no": "12345", "name": "Sahil Kumar"}]
    args = parse_args(["--organization-id", "org1", "--access-code", "gate", "--email", "g@campus.edu",
                       "--password", "secret"])

    session = load_session(args, client)

    client.login.assert_called_once_with("g@campus.edu", "secret")
    client.open_portal.assert_called_once_with("org1", "gate")
    assert session.config.roster == {"12345": "Sahil Kumar"}
    assert not session.config.keyword_required
    assert session.state == ScanState.IDLE


def test_main_requires_access_code(monkeypatch):
    monkeypatch.delenv("JUSTSCAN_ACCESS_CODE", raising=False)
    assert main(["--organization-id", "org1"]) == 2


def test_main_reports_bad_access_code():
    with patch("justscan.scanner.kiosk.AttendanceClient") as client_cls:
        client_cls.return_value.open_portal.side_effect = AttendanceError("Invalid access code", 401)
        assert main(["--organization-id", "org1", "--access-code", "wrong"]) == 1
