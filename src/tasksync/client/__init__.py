"""Client module - local replica, sync engine and CLI."""
