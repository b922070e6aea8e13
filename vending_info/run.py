#!/usr/bin/env python3
"""Run the Vending Machine Info API"""
import uvicorn

from vending_info.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "vending_info.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )
