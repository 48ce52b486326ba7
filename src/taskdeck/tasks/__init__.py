"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, TaskStatus, DerivedStatus)
- task_status.py: pure status derivation from raw timestamps
- task_store.py: in-memory ordered store for the task list view
- task_view.py: the task list view (authoritative refresh from the service)
- task_orchestrator.py: add / done / delete sequencing and dependent refreshes
"""
