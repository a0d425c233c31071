# lifti_sync/Auth/__init__.py
