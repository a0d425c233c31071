# cli.py
# Description: Command-line entry point (`lifti-sync`) for the local store and the cloud backup.
#
# Imports
import argparse
import asyncio
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from lifti_sync import config
from lifti_sync.Auth.auth_session import AuthSession
from lifti_sync.backup_api.exceptions import ConfigurationMissingError
from lifti_sync.backup_api.client import GoogleDriveBackupClient
from lifti_sync.DB.Lifti_DB import LiftiDB
from lifti_sync.DB.seed import seed_exercises
from lifti_sync.Logging_Config import configure_logging
from lifti_sync.Sync.schemas import SyncState
from lifti_sync.Sync.Sync_Orchestrator import SyncOrchestrator
#
########################################################################################################################
#
# Functions:

ACCESS_TOKEN_ENV = "LIFTI_ACCESS_TOKEN"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lifti-sync", description="Back up Lifti workout data to Google Drive.")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path (default from config).")
    parser.add_argument("--token", default=None,
                        help=f"Google OAuth access token (default: ${ACCESS_TOKEN_ENV}).")
    parser.add_argument("--no-log-file", action="store_true", help="Log to the console only.")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Show pending operations and last sync time.")
    sync_parser = sub.add_parser("sync", help="Pull, merge and push the backup now.")
    sync_parser.add_argument("--watch", action="store_true",
                             help="Keep syncing every [sync] auto_sync_interval_seconds until interrupted.")
    sub.add_parser("disconnect", help="Forget the linked account and revoke the token.")
    sub.add_parser("delete-backup", help="Delete the remote backup file.")
    sub.add_parser("seed", help="Write the built-in exercise catalogue into an empty database.")
    client_id_parser = sub.add_parser("set-client-id", help="Store the Google OAuth client id in the config file.")
    client_id_parser.add_argument("client_id")
    return parser


def format_state(state: SyncState) -> str:
    last = (datetime.fromtimestamp(state.last_synced_at / 1000).isoformat(timespec="seconds")
            if state.last_synced_at else "never")
    line = f"status={state.status} pending={state.pending_ops} last_synced={last}"
    if state.last_error:
        line += f" error={state.last_error!r}"
    return line


def build_backup_client() -> GoogleDriveBackupClient:
    return GoogleDriveBackupClient(
        backup_file_name=config.get_cli_setting("backup", "backup_file_name", "lifti-backup.json"),
        files_api=config.get_cli_setting("backup", "drive_files_api", "https://www.googleapis.com/drive/v3/files"),
        upload_api=config.get_cli_setting("backup", "drive_upload_api",
                                          "https://www.googleapis.com/upload/drive/v3/files"),
        timeout=float(config.get_cli_setting("backup", "request_timeout", 30.0)),
    )


async def run_command(args: argparse.Namespace) -> int:
    if args.command == "set-client-id":
        config.save_setting("backup", "google_client_id", args.client_id)
        print(f"Saved Google client id to {config.DEFAULT_CONFIG_PATH}.")
        return 0

    db = LiftiDB(args.db or config.get_lifti_db_path())
    if args.command == "seed":
        try:
            written = seed_exercises(db)
        finally:
            db.close_connection()
        print(f"Seeded {written} exercise templates.")
        return 0

    client = build_backup_client()
    auth = AuthSession(client_id=config.get_google_client_id())
    orchestrator = SyncOrchestrator(db, client, auth)
    orchestrator.subscribe(lambda state: logger.debug(f"Sync state: {format_state(state)}"))
    await orchestrator.initialize()
    token = args.token or os.environ.get(ACCESS_TOKEN_ENV)

    try:
        if args.command == "status":
            print(format_state(orchestrator.state))
            return 0

        if args.command == "disconnect":
            if token:
                await auth.hydrate_session(token)
            await orchestrator.disconnect_cloud()
            await auth.disconnect()
            print(format_state(orchestrator.state))
            return 0

        if not token:
            print(f"No access token. Pass --token or set {ACCESS_TOKEN_ENV}.", file=sys.stderr)
            return 2
        try:
            connected = await auth.connect_google(token)
        except ConfigurationMissingError as e:
            print(str(e), file=sys.stderr)
            return 1
        if not connected:
            print(f"Sign-in failed: {auth.state.last_error}", file=sys.stderr)
            return 1

        if args.command == "delete-backup":
            await orchestrator.delete_cloud_backup()
            print(format_state(orchestrator.state))
            return 1 if orchestrator.state.last_error else 0

        if args.watch:
            await orchestrator.run_periodic(config.get_auto_sync_interval())
        await orchestrator.sync_now()
        print(format_state(orchestrator.state))
        return 0 if orchestrator.state.status == "idle" else 1
    finally:
        await client.close()
        db.close_connection()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(config.load_settings(), log_to_file=not args.no_log_file)
    try:
        return asyncio.run(run_command(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())

#
# End of cli.py
########################################################################################################################
