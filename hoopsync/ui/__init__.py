"""
User interface package for the HoopSync live stat-keeper client.

This package contains the Flask JSON API used by the stat-keeper front end.
"""
from .web_app import create_app, run_web_app, WebAppState

__all__ = ["create_app", "run_web_app", "WebAppState"]
