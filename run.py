"""
Development server entry point.

Usage:
    python run.py              # normal mode
    python run.py --reload     # with auto-reload
"""
import argparse
import sys

import uvicorn

from feedplanner.config import settings

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the Feed Planner API")
    parser.add_argument("--reload", action="store_true", default=False)
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    uvicorn.run(
        "feedplanner.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.LOG_LEVEL.lower(),
        # asyncpg needs the selector loop on Windows, which uvloop does not provide
        loop="asyncio" if sys.platform == "win32" else "auto",
    )
