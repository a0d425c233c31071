# lifti_sync/backup_api/__init__.py
from .client import GoogleDriveBackupClient, BACKUP_FILE_NAME, DRIVE_FILES_API, DRIVE_UPLOAD_API
from .exceptions import (
    BackupAPIError, UnauthenticatedError, RemoteRequestFailedError, RemoteConnectionError,
    ConfigurationMissingError, CredentialRevocationFailedError, UnsupportedSnapshotVersionError
)

__all__ = [
    "GoogleDriveBackupClient", "BACKUP_FILE_NAME", "DRIVE_FILES_API", "DRIVE_UPLOAD_API",
    "BackupAPIError", "UnauthenticatedError", "RemoteRequestFailedError", "RemoteConnectionError",
    "ConfigurationMissingError", "CredentialRevocationFailedError", "UnsupportedSnapshotVersionError",
]
