# lifti_sync/backup_api/client.py
#
#
# Imports
import json
import uuid
from typing import Any, Dict, Optional
#
# 3rd-party Libraries
import httpx
from loguru import logger
from pydantic import ValidationError
#
# Local Imports
from lifti_sync.Sync.merge import resolve_conflict
from lifti_sync.Sync.schemas import SNAPSHOT_SCHEMA_VERSION, BackupSnapshot, PullResult, PushResult
from .exceptions import (
    RemoteConnectionError,
    RemoteRequestFailedError,
    UnauthenticatedError,
    UnsupportedSnapshotVersionError,
)
#
########################################################################################################################
#
# Functions:

BACKUP_FILE_NAME = 'lifti-backup.json'
DRIVE_FILES_API = 'https://www.googleapis.com/drive/v3/files'
DRIVE_UPLOAD_API = 'https://www.googleapis.com/upload/drive/v3/files'
APP_DATA_FOLDER = 'appDataFolder'


class GoogleDriveBackupClient:
    """
    Stores one BackupSnapshot per account as a JSON file in the Drive app-data folder.

    The file's `modifiedTime` is handed out as the revision token. Revisions are
    accepted on push/pull for interface symmetry but are not used to make
    conditional requests.
    """

    def __init__(self, token: Optional[str] = None,
                 backup_file_name: str = BACKUP_FILE_NAME,
                 files_api: str = DRIVE_FILES_API,
                 upload_api: str = DRIVE_UPLOAD_API,
                 timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.token = token
        self.backup_file_name = backup_file_name
        self.files_api = files_api.rstrip('/')
        self.upload_api = upload_api.rstrip('/')
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def set_access_token(self, token: Optional[str]):
        self.token = token or None

    def _require_token(self) -> str:
        if not self.token:
            raise UnauthenticatedError("Google access token is missing. Connect backup again.")
        return self.token

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        content: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        token = self._require_token()
        client = await self._get_client()
        request_headers = {"Authorization": f"Bearer {token}"}
        request_headers.update(headers or {})

        try:
            response = await client.request(method, url, params=params, content=content, headers=request_headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            error_detail = e.response.reason_phrase or str(e)
            response_data = None
            try:
                response_data = e.response.json()
                if isinstance(response_data, dict) and isinstance(response_data.get("error"), dict):
                    error_detail = response_data["error"].get("message", error_detail)
            except ValueError:
                pass # Body is not JSON
            if e.response.status_code == 401:
                raise UnauthenticatedError(f"Google rejected the access token: {error_detail}") from e
            raise RemoteRequestFailedError(e.response.status_code, error_detail, response_data=response_data) from e
        except httpx.RequestError as e:
            raise RemoteConnectionError(f"Connection error to {url}: {e}") from e

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteRequestFailedError(response.status_code, "Failed to decode JSON response",
                                           response_data={"raw_text": response.text}) from e

    # --- Drive file helpers ---
    async def find_backup_file(self) -> Optional[Dict[str, Any]]:
        """Returns `{id, modifiedTime}` of the backup file, or None if there is none."""
        query = f"name='{self.backup_file_name}' and trashed=false and '{APP_DATA_FOLDER}' in parents"
        result = await self._request("GET", self.files_api, params={
            "spaces": APP_DATA_FOLDER,
            "q": query,
            "fields": "files(id,modifiedTime)",
            "pageSize": 1,
        })
        files = result.get("files") or []
        return files[0] if files else None

    async def _upload_new_backup(self, content: str) -> PushResult:
        metadata = {
            "name": self.backup_file_name,
            "parents": [APP_DATA_FOLDER],
            "mimeType": "application/json",
        }
        boundary = f"lifti-{uuid.uuid4()}"
        body = (
            f"--{boundary}\r\n"
            "Content-Type: application/json; charset=UTF-8\r\n\r\n"
            f"{json.dumps(metadata)}\r\n"
            f"--{boundary}\r\n"
            "Content-Type: application/json\r\n\r\n"
            f"{content}\r\n"
            f"--{boundary}--"
        )
        file = await self._request(
            "POST", self.upload_api,
            params={"uploadType": "multipart", "fields": "id,modifiedTime"},
            content=body,
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
        )
        logger.info(f"Created remote backup file '{self.backup_file_name}'.")
        return PushResult(revision=file.get("modifiedTime"))

    async def _update_existing_backup(self, file_id: str, content: str) -> PushResult:
        file = await self._request(
            "PATCH", f"{self.upload_api}/{file_id}",
            params={"uploadType": "media", "fields": "id,modifiedTime"},
            content=content,
            headers={"Content-Type": "application/json"},
        )
        logger.info(f"Updated remote backup file {file_id}.")
        return PushResult(revision=file.get("modifiedTime"))

    @staticmethod
    def _parse_snapshot(data: Any) -> BackupSnapshot:
        if not isinstance(data, dict):
            raise RemoteRequestFailedError(200, "Backup file is not a JSON object")
        schema_version = data.get("schemaVersion")
        if schema_version != SNAPSHOT_SCHEMA_VERSION:
            raise UnsupportedSnapshotVersionError(schema_version)
        try:
            return BackupSnapshot.model_validate(data)
        except ValidationError as e:
            raise RemoteRequestFailedError(200, f"Backup file is not a valid snapshot: {e}") from e

    # --- Backup service API ---
    async def connect(self, token: Optional[str] = None):
        """Installs the bearer credential. Fails if none is available."""
        if token is not None:
            self.set_access_token(token)
        self._require_token()

    async def disconnect(self):
        self.token = None
        await self.close()

    async def push_changes(self, snapshot: BackupSnapshot, since_revision: Optional[str] = None) -> PushResult:
        """Uploads the snapshot, creating the backup file on first push."""
        content = json.dumps(snapshot.to_wire())
        file = await self.find_backup_file()
        if not file:
            return await self._upload_new_backup(content)
        return await self._update_existing_backup(file["id"], content)

    async def pull_changes(self, since_revision: Optional[str] = None) -> PullResult:
        """Downloads the remote snapshot. No backup file yet means `snapshot=None`."""
        file = await self.find_backup_file()
        if not file:
            logger.info("No remote backup file found.")
            return PullResult(snapshot=None)
        data = await self._request("GET", f"{self.files_api}/{file['id']}", params={"alt": "media"})
        return PullResult(snapshot=self._parse_snapshot(data), revision=file.get("modifiedTime"))

    def resolve_conflict(self, local: BackupSnapshot, remote: BackupSnapshot) -> BackupSnapshot:
        return resolve_conflict(local, remote)

    async def delete_remote_backup(self):
        file = await self.find_backup_file()
        if not file:
            logger.info("No remote backup file to delete.")
            return
        await self._request("DELETE", f"{self.files_api}/{file['id']}")
        logger.info(f"Deleted remote backup file {file['id']}.")

#
# End of lifti_sync/backup_api/client.py
########################################################################################################################
