"""Server module - reference remote authority (FastAPI + SQLAlchemy)."""
