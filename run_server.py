"""Serve the Threadline API locally with Uvicorn."""
from __future__ import annotations

import os

import uvicorn

from threadline.config import get_settings


def main() -> None:
  settings = get_settings()
  uvicorn.run(
    "threadline.main:app",
    host=os.getenv("THREADLINE_HOST", "127.0.0.1"),
    port=int(os.getenv("THREADLINE_PORT", "8000")),
    log_level=settings.log_level.lower(),
    reload=os.getenv("THREADLINE_RELOAD", "false").lower() == "true",
  )


if __name__ == "__main__":
  main()
