#!/usr/bin/env python3
"""
Run the mentorship API with uvicorn.

The in-process maintenance scheduler only makes sense with a single
process; set SCHEDULER_ENABLED=false and call /cron from an external
scheduler when running several workers.
"""

import os

import uvicorn

from mentorship.config.settings import settings


def main():
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "true").lower() == "true"

    print("Starting Mentorship API...")
    print(f"Host: {host}")
    print(f"Port: {port}")
    print(f"Reload: {reload}")
    print(f"Maintenance scheduler: {'on' if settings.SCHEDULER_ENABLED else 'off (use /cron)'}")
    print("=" * 50)

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
