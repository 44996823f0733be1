# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file exists to make the repo self-documenting without opening config.py.
"""

ENV_VARS = {
    # App / logging
    "TODOCAL_APP_NAME": "App display name (default: TodoCalendar).",
    "TODOCAL_LOG_LEVEL": "Console logging level (default: WARNING; the log file always gets DEBUG).",
    # Paths (gitignored)
    "TODOCAL_DATA_DIR": "Local data directory (default: .local/todocal).",
    "TODOCAL_PREFS_DB_PATH": "Key-value prefs SQLite path (default: <data_dir>/prefs.sqlite3).",
    # Reminders
    "TODOCAL_NOTIFICATIONS_ENABLED": "Allow task reminders (true/false, default: true).",
    "TODOCAL_REMINDER_POLL_SECONDS": "How often due reminders are checked (default: 5, min 0.5).",
    "TODOCAL_REMINDER_TITLE": "Reminder title (default: Task Reminder).",
    "TODOCAL_CHANNEL_ID": "Notification channel id (default: channelId).",
    "TODOCAL_CHANNEL_NAME": "Notification channel name (default: channelName).",
}
