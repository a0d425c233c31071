# conftest.py
# Description: Shared fixtures. `FakeDrive` is an in-memory Google Drive app-data folder plus the
# Google identity endpoints, served through httpx.MockTransport.
#
# Imports
import json
from typing import Dict, List, Optional, Set
#
# Third-Party Imports
import httpx
import pytest
#
# Local Imports
from lifti_sync.Auth.auth_session import AuthSession, AuthState
from lifti_sync.Auth.google_auth import AuthUser
#
########################################################################################################################
#
# Functions:

VALID_TOKEN = "good-token"


class FakeDrive:
    """Serves the handful of Drive v3 calls the backup client makes."""

    def __init__(self, valid_tokens: Optional[Set[str]] = None):
        self.valid_tokens = valid_tokens if valid_tokens is not None else {VALID_TOKEN}
        self.files: Dict[str, dict] = {}  # file id -> {"name", "content", "modifiedTime"}
        self.requests: List[httpx.Request] = []
        self.fail_uploads = False
        self.fail_downloads = False
        self.revoked: List[str] = []
        self._counter = 0

    # --- helpers for tests ---
    def _next_revision(self) -> str:
        self._counter += 1
        return f"2026-01-01T00:00:{self._counter:02d}.000Z"

    def put_backup(self, document: dict, name: str = "lifti-backup.json") -> str:
        self._counter += 1
        file_id = f"file-{self._counter}"
        self.files[file_id] = {"name": name, "content": json.dumps(document),
                               "modifiedTime": self._next_revision()}
        return file_id

    def backup_document(self) -> Optional[dict]:
        for file in self.files.values():
            return json.loads(file["content"])
        return None

    def methods(self) -> List[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    # --- request handling ---
    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.url.host == "oauth2.googleapis.com" and path == "/revoke":
            token = request.url.params.get("token")
            if token not in self.valid_tokens:
                return httpx.Response(400, json={"error": "invalid_token"})
            self.revoked.append(token)
            return httpx.Response(200, json={})

        token = request.headers.get("Authorization", "").removeprefix("Bearer ")
        if token not in self.valid_tokens:
            return httpx.Response(401, json={"error": {"code": 401, "message": "Invalid Credentials"}})

        if path == "/oauth2/v3/userinfo":
            return httpx.Response(200, json={"sub": "user-1", "email": "lifter@example.com",
                                             "name": "Lifter", "picture": "https://example.com/a.png"})

        if path == "/drive/v3/files" and request.method == "GET":
            name = request.url.params["q"].split("'")[1]
            matches = [{"id": file_id, "modifiedTime": f["modifiedTime"]}
                       for file_id, f in self.files.items() if f["name"] == name]
            return httpx.Response(200, json={"files": matches[:1]})

        if path.startswith("/drive/v3/files/"):
            file_id = path.rsplit("/", 1)[1]
            if file_id not in self.files:
                return httpx.Response(404, json={"error": {"code": 404, "message": "File not found"}})
            if request.method == "DELETE":
                del self.files[file_id]
                return httpx.Response(204)
            if self.fail_downloads:
                return httpx.Response(500, json={"error": {"code": 500, "message": "Backend Error"}})
            return httpx.Response(200, content=self.files[file_id]["content"].encode())

        if path.startswith("/upload/drive/v3/files"):
            if self.fail_uploads:
                return httpx.Response(503, json={"error": {"code": 503, "message": "Service Unavailable"}})
            if request.method == "POST":
                return self._create(request)
            file_id = path.rsplit("/", 1)[1]
            file = self.files[file_id]
            file["content"] = request.content.decode()
            file["modifiedTime"] = self._next_revision()
            return httpx.Response(200, json={"id": file_id, "modifiedTime": file["modifiedTime"]})

        return httpx.Response(404, json={"error": {"code": 404, "message": f"Unexpected {request.method} {path}"}})

    def _create(self, request: httpx.Request) -> httpx.Response:
        boundary = request.headers["Content-Type"].split("boundary=", 1)[1]
        parts = [p for p in request.content.decode().split(f"--{boundary}") if p.strip() not in ("", "--")]
        metadata = json.loads(parts[0].split("\r\n\r\n", 1)[1].strip())
        content = parts[1].split("\r\n\r\n", 1)[1].strip()
        self._counter += 1
        file_id = f"file-{self._counter}"
        self.files[file_id] = {"name": metadata["name"], "content": content,
                               "modifiedTime": self._next_revision()}
        return httpx.Response(200, json={"id": file_id, "modifiedTime": self.files[file_id]["modifiedTime"]})


# --- Fixtures ---

@pytest.fixture
def fake_drive():
    return FakeDrive()


@pytest.fixture
def signed_in_auth():
    """An AuthSession already holding a valid Google credential."""
    auth = AuthSession(client_id="client-id.apps.googleusercontent.com")
    auth.state = AuthState(status='authenticated', provider='google',
                           user=AuthUser(id="user-1", email="lifter@example.com"),
                           access_token=VALID_TOKEN, token_expires_at=None)
    return auth

#
# End of conftest.py
########################################################################################################################
