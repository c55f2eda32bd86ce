"""
HoopSync Live Stat Keeper

A live basketball stat-entry client: stat-keepers log shots, rebounds,
fouls and substitutions that are relayed to a spreadsheet-backed store,
while the game clock, score, lineups and playtime stay reconciled across
every keeper watching the same game.
"""
from .config import AppConfig, load_config
from .models import GameSession, Period, Role, Player, Roster
from .services import LiveGameSession, ServiceFactory
from .ui import create_app, run_web_app
from .utils import fmt_mmss, APP_TITLE

__version__ = "1.0.0"

__all__ = [
    "AppConfig", "load_config", "GameSession", "Period", "Role", "Player",
    "Roster", "LiveGameSession", "ServiceFactory", "create_app",
    "run_web_app", "fmt_mmss", "APP_TITLE"
]
