#!/usr/bin/env python3
"""Run script for ghtasks."""

import os

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "ghtasks.api.app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
