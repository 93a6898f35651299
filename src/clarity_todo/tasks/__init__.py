"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority, TaskPatch) and wire format
- collection.py: pure list operations shared by the store and the client cache
- kv_storage.py: SQLite single-record storage
- task_store.py: the serialized, durable global task list
"""
