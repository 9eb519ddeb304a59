"""
CLI entrypoint for the AI Tools Hub API server.

Usage:
  hub-api --host 0.0.0.0 --port 8000
  hub-api --db data/hub.db --reload
"""

from __future__ import annotations

import argparse
import os


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the AI Tools Hub API server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--db", help="Document store path (sets HUB_DB_PATH)")
    parser.add_argument("--storage", help="Object storage directory (sets HUB_STORAGE_PATH)")
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    # Settings are read at import time, so paths go through the environment.
    if args.db:
        os.environ["HUB_DB_PATH"] = args.db
    if args.storage:
        os.environ["HUB_STORAGE_PATH"] = args.storage

    import uvicorn

    uvicorn.run("src.api:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
