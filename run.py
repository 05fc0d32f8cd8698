#!/usr/bin/env python3
"""
Run script for the Call Quality Scoring Service
"""
import uvicorn

from callscore.config.settings import settings
from callscore.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
