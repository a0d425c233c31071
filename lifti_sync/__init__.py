# lifti_sync/__init__.py
# Offline-first local store and Google Drive backup sync for Lifti workout data.
__version__ = "0.1.0"
