"""Adapters that connect the log point core to SQLite and the console."""
