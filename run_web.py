#!/usr/bin/env python3
"""
Main entry point for the HoopSync stat-keeper web API.

This script launches the Flask-based server using settings from
``hoopsync.json`` (if present) and HOOPSYNC_* environment variables.
"""
import os

from hoopsync.config import load_config
from hoopsync.ui.web_app import run_web_app

if __name__ == "__main__":
    config_path = os.environ.get("HOOPSYNC_CONFIG", os.path.join(os.path.dirname(__file__), "hoopsync.json"))
    run_web_app(load_config(config_path))
