"""AI Session Tools: progress log reminders and session counting."""

__version__ = "0.1.0"
