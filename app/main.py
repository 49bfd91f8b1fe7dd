"""Repo-root Uvicorn entrypoint.

    uvicorn app.main:app --reload

Re-exports the FastAPI app built in `backend/portal/main.py`.
"""

from backend.portal.main import app  # noqa: F401
