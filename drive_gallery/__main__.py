"""Run the gallery with uvicorn: ``python -m drive_gallery``."""
from __future__ import annotations

import uvicorn

from drive_gallery.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("drive_gallery.main:app", host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
