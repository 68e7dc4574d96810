"""Google Drive image gallery served with FastAPI."""
