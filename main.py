"""
Main entry point for the Nanny Match Service.

This module provides the main entry point for running the FastAPI application
using uvicorn server.
"""

import uvicorn
from dotenv import load_dotenv

from api.app import create_app
from api.config import get_settings

# Load environment variables from .env file
load_dotenv()

app = create_app()

if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level,
    )
