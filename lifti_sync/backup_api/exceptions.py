# lifti_sync/backup_api/exceptions.py
#
#
#######################################################################################################################
#
# Functions:

class BackupAPIError(Exception):
    """Base exception for backup_api errors."""
    pass

class UnauthenticatedError(BackupAPIError):
    """Raised when a remote call is attempted without a bearer credential."""
    pass

class RemoteRequestFailedError(BackupAPIError):
    """Raised for non-2xx responses or responses that cannot be parsed."""
    def __init__(self, status_code: int, message: str, response_data: dict = None):
        super().__init__(f"Drive request failed ({status_code}): {message}")
        self.status_code = status_code
        self.response_data = response_data or {}

class RemoteConnectionError(RemoteRequestFailedError):
    """Raised for network or connection issues (no HTTP status)."""
    def __init__(self, message: str):
        BackupAPIError.__init__(self, message)
        self.status_code = 0
        self.response_data = {}

class ConfigurationMissingError(BackupAPIError):
    """Raised when the backup provider is not configured (e.g. no OAuth client id)."""
    pass

class CredentialRevocationFailedError(BackupAPIError):
    """Raised when revoking a credential fails. Callers treat revocation as best-effort."""
    pass

class UnsupportedSnapshotVersionError(BackupAPIError):
    """Raised when a downloaded backup has a schemaVersion this client does not know."""
    def __init__(self, schema_version):
        super().__init__(f"Unsupported backup schema version: {schema_version!r}")
        self.schema_version = schema_version

#
# End of lifti_sync/backup_api/exceptions.py
########################################################################################################################
