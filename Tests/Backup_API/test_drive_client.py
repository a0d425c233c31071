# test_drive_client.py
#
#
# Imports
import json
#
# Third-Party Imports
import httpx
import pytest
import pytest_asyncio
#
# Local Imports
from lifti_sync.backup_api import (
    BACKUP_FILE_NAME,
    GoogleDriveBackupClient,
    RemoteConnectionError,
    RemoteRequestFailedError,
    UnauthenticatedError,
    UnsupportedSnapshotVersionError,
)
from lifti_sync.Domain.domain_types import Plan
from lifti_sync.Sync.schemas import BackupSnapshot
#
########################################################################################################################
#
# Functions:

# Mark all tests in this file as asyncio
pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def client(fake_drive):
    drive_client = GoogleDriveBackupClient(token="good-token", transport=fake_drive.transport)
    yield drive_client
    await drive_client.close()


def _snapshot(*plans: Plan, exported_at: int = 1000) -> BackupSnapshot:
    return BackupSnapshot(exported_at=exported_at, plans=list(plans))


def _wire(snapshot: BackupSnapshot) -> dict:
    return snapshot.to_wire()


class TestConnect:
    async def test_connect_installs_token(self, fake_drive):
        drive_client = GoogleDriveBackupClient(transport=fake_drive.transport)
        await drive_client.connect("good-token")
        assert drive_client.token == "good-token"
        await drive_client.close()

    async def test_connect_without_token_fails(self):
        with pytest.raises(UnauthenticatedError):
            await GoogleDriveBackupClient().connect()

    async def test_requests_without_token_fail_before_network(self, fake_drive):
        drive_client = GoogleDriveBackupClient(transport=fake_drive.transport)
        with pytest.raises(UnauthenticatedError):
            await drive_client.pull_changes()
        assert fake_drive.requests == []

    async def test_disconnect_forgets_token(self, client):
        await client.disconnect()
        assert client.token is None
        with pytest.raises(UnauthenticatedError):
            await client.find_backup_file()


class TestPush:
    async def test_first_push_creates_file_in_app_data(self, client, fake_drive):
        result = await client.push_changes(_snapshot(Plan(id="p1", name="Push", created_at=1, updated_at=2)))

        assert result.revision is not None
        assert len(fake_drive.files) == 1
        stored = next(iter(fake_drive.files.values()))
        assert stored["name"] == BACKUP_FILE_NAME
        assert fake_drive.backup_document()["plans"][0]["id"] == "p1"

        upload = fake_drive.requests[-1]
        assert upload.method == "POST"
        assert upload.url.params["uploadType"] == "multipart"
        assert b'"parents": ["appDataFolder"]' in upload.content

    async def test_second_push_updates_same_file(self, client, fake_drive):
        first = await client.push_changes(_snapshot(exported_at=1))
        second = await client.push_changes(_snapshot(Plan(id="p2", name="Legs", created_at=1), exported_at=2))

        assert len(fake_drive.files) == 1
        assert first.revision != second.revision
        assert fake_drive.requests[-1].method == "PATCH"
        assert fake_drive.requests[-1].url.params["uploadType"] == "media"
        assert fake_drive.backup_document()["exportedAt"] == 2

    async def test_search_is_scoped_to_app_data_folder(self, client, fake_drive):
        await client.find_backup_file()
        params = fake_drive.requests[0].url.params
        assert params["spaces"] == "appDataFolder"
        assert f"name='{BACKUP_FILE_NAME}'" in params["q"]
        assert fake_drive.requests[0].headers["Authorization"] == "Bearer good-token"

    async def test_uploaded_document_is_camel_case(self, client, fake_drive):
        await client.push_changes(_snapshot(Plan(id="p1", name="Push", created_at=1, updated_at=2)))
        document = fake_drive.backup_document()
        assert document["schemaVersion"] == 1
        assert set(document) == {"schemaVersion", "exportedAt", "exercises", "plans", "sessions"}
        assert document["plans"][0]["updatedAt"] == 2

    async def test_upload_failure_raises(self, client, fake_drive):
        fake_drive.fail_uploads = True
        with pytest.raises(RemoteRequestFailedError) as exc_info:
            await client.push_changes(_snapshot())
        assert exc_info.value.status_code == 503
        assert "Service Unavailable" in str(exc_info.value)


class TestPull:
    async def test_pull_without_file_returns_empty_result(self, client):
        result = await client.pull_changes()
        assert result.snapshot is None
        assert result.revision is None

    async def test_pull_returns_snapshot_and_revision(self, client, fake_drive):
        remote = _snapshot(Plan(id="p1", name="Remote", created_at=1, updated_at=150), exported_at=77)
        fake_drive.put_backup(_wire(remote))

        result = await client.pull_changes("ignored-revision")

        assert result.snapshot == remote
        assert result.revision == next(iter(fake_drive.files.values()))["modifiedTime"]
        assert fake_drive.requests[-1].url.params["alt"] == "media"

    async def test_push_then_pull_round_trip(self, client):
        snapshot = _snapshot(Plan(id="p1", name="Push", created_at=1, updated_at=2))
        await client.push_changes(snapshot)
        assert (await client.pull_changes()).snapshot == snapshot

    async def test_unknown_schema_version_rejected(self, client, fake_drive):
        fake_drive.put_backup({"schemaVersion": 2, "exportedAt": 1, "exercises": [], "plans": [], "sessions": []})
        with pytest.raises(UnsupportedSnapshotVersionError) as exc_info:
            await client.pull_changes()
        assert exc_info.value.schema_version == 2

    async def test_malformed_snapshot_rejected(self, client, fake_drive):
        fake_drive.put_backup({"schemaVersion": 1, "plans": "not a list"})
        with pytest.raises(RemoteRequestFailedError, match="not a valid snapshot"):
            await client.pull_changes()

    async def test_download_failure_raises(self, client, fake_drive):
        fake_drive.put_backup(_wire(_snapshot()))
        fake_drive.fail_downloads = True
        with pytest.raises(RemoteRequestFailedError) as exc_info:
            await client.pull_changes()
        assert exc_info.value.status_code == 500


class TestErrors:
    async def test_rejected_token_is_unauthenticated(self, fake_drive):
        drive_client = GoogleDriveBackupClient(token="expired", transport=fake_drive.transport)
        with pytest.raises(UnauthenticatedError, match="Invalid Credentials"):
            await drive_client.pull_changes()
        await drive_client.close()

    async def test_network_failure_is_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("no route to host", request=request)

        drive_client = GoogleDriveBackupClient(token="t", transport=httpx.MockTransport(handler))
        with pytest.raises(RemoteConnectionError) as exc_info:
            await drive_client.push_changes(_snapshot())
        assert exc_info.value.status_code == 0
        assert isinstance(exc_info.value, RemoteRequestFailedError)
        await drive_client.close()

    async def test_non_json_success_body(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>captive portal</html>")

        drive_client = GoogleDriveBackupClient(token="t", transport=httpx.MockTransport(handler))
        with pytest.raises(RemoteRequestFailedError, match="decode JSON"):
            await drive_client.find_backup_file()
        await drive_client.close()


class TestDelete:
    async def test_delete_removes_file(self, client, fake_drive):
        fake_drive.put_backup(_wire(_snapshot()))
        await client.delete_remote_backup()
        assert fake_drive.files == {}
        assert fake_drive.requests[-1].method == "DELETE"

    async def test_delete_without_file_is_noop(self, client, fake_drive):
        await client.delete_remote_backup()
        assert [r.method for r in fake_drive.requests] == ["GET"]


class TestResolveConflict:
    async def test_delegates_to_merge(self, client):
        local = _snapshot(Plan(id="p1", name="A", created_at=0, updated_at=100))
        remote = _snapshot(Plan(id="p1", name="B", created_at=0, updated_at=150),
                           Plan(id="p2", name="C", created_at=0, updated_at=50))
        merged = client.resolve_conflict(local, remote)
        assert [(p.id, p.name) for p in merged.plans] == [("p1", "B"), ("p2", "C")]
        assert json.loads(json.dumps(merged.to_wire()))["schemaVersion"] == 1

#
# End of test_drive_client.py
########################################################################################################################
