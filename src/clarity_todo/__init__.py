"""
Clarity: a personal task list.

Components:
- tasks/: task model, pure collection operations, SQLite-backed TaskStore
- views/: projector (filter -> search -> sort -> group) and list summary
- sync/: httpx API client and the optimistic SyncController
- api/: FastAPI boundary with the {success, data, error} envelope
- cli/, connectors/: `clarity serve` and the interactive console client
"""
