"""
ical-filter HTTP module

FastAPI application exposing the filtered feed endpoints.
"""

from .app import create_app

__all__ = ['create_app']
