# lifti_sync/Sync/__init__.py
