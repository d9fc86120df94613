"""
justscan/scanner/client.py
-----------------
HTTP client the kiosk uses to talk to the JustScan API.
"""

import logging

import requests

from justscan.utils.auth import PORTAL_SESSION_HEADER

logger = logging.getLogger(__name__)


class AttendanceError(Exception):
    """A request to the API failed; the message is the server's own when it sent one."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class AttendanceClient:

    def __init__(self, base_url, timeout=10, http=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.http = http or requests.Session()
        self.portal_session_id = None
        self.organization_id = None

    def _request(self, method, path, **kwargs):
        headers = kwargs.pop("headers", {})
        if self.portal_session_id:
            headers[PORTAL_SESSION_HEADER] = self.portal_session_id

        try:
            response = self.http.request(
                method, f"{self.base_url}{path}", headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise AttendanceError(f"Network error: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            raise AttendanceError(message or f"Request failed with status {response.status_code}",
                                  response.status_code)
        return body

    def login(self, email, password):
        return self._request("POST", "/api/users/login", json={"email": email, "password": password})

    def open_portal(self, organization_id, access_code):
        body = self._request("POST", "/api/organizations/verify", json={
            "organization_id": organization_id,
            "access_code": access_code
        })
        self.portal_session_id = body["session_id"]
        self.organization_id = body["organization"]["_id"]
        logger.info("[CLIENT] Portal session opened for %s", body["organization"]["name"])
        return body

    def fetch_organization(self):
        return self._request("GET", "/api/organizations/current")

    def fetch_roster(self):
        return self._request("GET", "/api/students/roll-numbers")

    def record_scan(self, roll_no):
        return self._request("POST", "/api/entries/scan", json={"roll_no": roll_no})
