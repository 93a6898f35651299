# config.example.py

"""
Documentation-only module (safe to commit).

Configuration is read from environment variables, optionally via a local .env
file (gitignored). Nothing is required: every variable has a local default.
"""

ENV_VARS = {
    # App / logging
    "CLARITY_APP_NAME": "App display name (default: clarity).",
    "CLARITY_LOG_LEVEL": "Console logging level (default: INFO).",
    # Server
    "CLARITY_HOST": "Bind address for `clarity serve` (default: 127.0.0.1).",
    "CLARITY_PORT": "Port for `clarity serve` (default: 8787).",
    # Paths (gitignored)
    "CLARITY_DATA_DIR": "Local data directory, also holds clarity.log (default: .local/clarity).",
    "CLARITY_TASKS_DB_PATH": "Task list SQLite path (default: <data_dir>/todos.sqlite3).",
    "CLARITY_STORAGE_KEY": "Key of the single stored task-list record (default: todos_list_v1).",
    # Console client
    "CLARITY_API_BASE_URL": "Server URL used by `clarity console` (default: http://<host>:<port>).",
    "CLARITY_API_TIMEOUT_SECONDS": "Per-request timeout, min 0.5 (default: 10).",
    "CLARITY_DEFAULT_PRIORITY": "Priority for new tasks: none|low|medium|high (default: none).",
}
