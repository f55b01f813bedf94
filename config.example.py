# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting even without opening .env.example.
"""

ENV_VARS = {
    # App / logging
    "STUDY_APP_NAME": "App display name (default: study-planner).",
    "STUDY_LOG_LEVEL": "Console logging level (default: WARNING; the log file always gets DEBUG).",
    # Connectors
    "STUDY_CONSOLE_ENABLED": "Run the console REPL (true/false). Off => reminders only.",
    # Storage
    "STUDY_STORAGE": "Storage backend: sqlite (default) or json.",
    "STUDY_DATA_DIR": "Local data directory (default: .local/study_planner).",
    "STUDY_TASKS_DB_PATH": "SQLite path (default: <data_dir>/tasks.sqlite3).",
    "STUDY_TASKS_JSON_PATH": "JSON file path (default: <data_dir>/tasks.json).",
    # Reminders
    "STUDY_REMINDER_INTERVAL_SECONDS": "Seconds between reminder checks (default: 60).",
    "STUDY_REMINDER_DEDUPE": "Send each reminder window once per task (default: false).",
}
