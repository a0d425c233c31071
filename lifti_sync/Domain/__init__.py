# lifti_sync/Domain/__init__.py
