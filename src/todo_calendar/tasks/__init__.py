"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Color, TaskState)
- task_registry.py: tasks by day + archive, transitions and persistence
- history.py: history log (completed / failed tasks) on top of the registry
- task_api.py: small high-level helpers used by the presentation layer
"""
