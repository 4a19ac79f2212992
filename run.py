"""Application entry point.

This module serves as the entry point for running the FastAPI application.
It creates and configures the FastAPI app instance and includes all API routers.
"""

import logging

import uvicorn

from app.core.config import settings

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=True)
