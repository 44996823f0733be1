"""Calendar to-do list: scheduled tasks by day, auto-failing overdue tasks, history and reminders."""

__version__ = "0.1.0"
