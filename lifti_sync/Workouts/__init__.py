# lifti_sync/Workouts/__init__.py
