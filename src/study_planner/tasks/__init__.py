"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority) and the JSON blob codec
- task_persistence.py: SQLite key-value and JSON file backends
- task_store.py: in-memory collection with write-through persistence
- task_views.py: stats, listing order, timeline, overdue / time-left labels
- task_scheduler.py: periodic reminder scan
- task_api.py: small input helpers used by front ends
"""
