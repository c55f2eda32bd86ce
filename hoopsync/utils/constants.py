"""
Constants for the HoopSync live stat-keeper client.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "HoopSync Stat Keeper"

# Game timing defaults
PERIODS = ["Q1", "Q2", "Q3", "Q4", "OT"]
PERIOD_LENGTH_MIN = 8
PERIOD_LENGTH_SEC = PERIOD_LENGTH_MIN * 60

# Players on the floor per team
FLOOR_SIZE = 5

# Team keys and the player_id prefix used for each roster
TEAM_KEYS = ("home", "away")
TEAM_PREFIXES = {
    "home": "H",
    "away": "A",
}

# Event codes offered on the stat pad, with button labels
EVENT_TYPES = {
    "2M": "2 MAKE",
    "2X": "2 MISS",
    "3M": "3 MAKE",
    "3X": "3 MISS",
    "FTM": "FT MAKE",
    "FTX": "FT MISS",
    "OREB": "O REB",
    "DREB": "D REB",
    "AST": "AST",
    "STL": "STL",
    "BLK": "BLK",
    "TO": "TO",
    "FOUL": "FOUL",
}

# Points credited for scoring events; every other code is worth nothing
POINT_VALUES = {
    "2M": 2,
    "3M": 3,
    "FTM": 1,
}

# Scheduling (seconds)
CLOCK_TICK_INTERVAL_SEC = 1.0
POLL_INTERVAL_SEC = 1.2
PLAYTIME_PUBLISH_INTERVAL_SEC = 15.0
META_PUBLISH_INTERVAL_SEC = 5.0

# Network timeouts (seconds)
WRITE_TIMEOUT_SEC = 10.0
READ_TIMEOUT_SEC = 12.0

# Trailing play-by-play rows kept in memory
PBP_WINDOW = 120

# Audit reasons attached to clock edits
REASON_QUARTER_CHANGE = "quarter_change_reset"
REASON_MANUAL_CLOCK_EDIT = "manual_clock_edit"

# Local web API defaults
DEFAULT_WEB_HOST = "127.0.0.1"
DEFAULT_WEB_PORT = 7122
