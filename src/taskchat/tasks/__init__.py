"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskPriority, TaskAction)
- task_store.py: ordered per-user task collection over a key/value store
"""
