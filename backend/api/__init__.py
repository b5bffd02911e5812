"""
JudgeGPT API package.

Provides the FastAPI application for the JudgeGPT live debate service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
