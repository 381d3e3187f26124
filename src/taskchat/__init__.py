"""Per-user task list manager with a conversational front-end."""

__version__ = "0.1.0"
