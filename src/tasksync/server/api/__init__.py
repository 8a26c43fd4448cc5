"""API routes for the tasksync reference server."""
