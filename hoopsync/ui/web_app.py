"""
Web application module for the HoopSync live stat-keeper client.

This module contains the Flask server that exposes the live game session
as JSON API endpoints for the stat-keeper front end.
"""
from typing import Optional

from flask import Flask, jsonify, request

from ..config import AppConfig, ConfigurationError, load_config
from ..errors import RemoteStoreError, UnauthorizedError, ValidationError
from ..services import KeeperPreferences, LiveGameSession, ServiceFactory
from ..utils import APP_TITLE, EVENT_TYPES, PERIODS, get_logger

log = get_logger(__name__)


class WebAppState:
    """
    State holder for the web application.

    Uses the service factory to build the live session and preferences
    store for one stat-keeper device.
    """

    def __init__(self, config: Optional[AppConfig] = None, live_session: Optional[LiveGameSession] = None):
        self.config = config or load_config()
        self.service_factory = ServiceFactory(self.config)
        self.live_session = live_session or self.service_factory.create_live_session()
        self.preferences_service = self.service_factory.get_preferences_service()


def _error(e: Exception):
    """Map a service exception to the JSON error response."""
    if isinstance(e, UnauthorizedError):
        return jsonify({"success": False, "error": str(e)}), 401
    if isinstance(e, (ValidationError, ConfigurationError)):
        return jsonify({"success": False, "error": str(e)}), 400
    if isinstance(e, RemoteStoreError):
        return jsonify({"success": False, "error": str(e)}), 502
    log.exception("Unexpected error handling %s", request.path)
    return jsonify({"success": False, "error": str(e)}), 500


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(state: Optional[WebAppState] = None) -> Flask:
    """
    Create and configure the Flask application with API endpoints.

    Args:
        state: Pre-built state holder (built from the environment if omitted)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app_state = state or WebAppState()
    app.config["HOOPSYNC_STATE"] = app_state
    live = app_state.live_session

    # ==================== Meta Endpoints ==================== #

    @app.route("/api/health", methods=["GET"])
    def health():
        return jsonify({"success": True, "app": APP_TITLE})

    @app.route("/api/options", methods=["GET"])
    def options():
        """Event codes and periods for the stat pad."""
        return jsonify({
            "success": True,
            "events": [{"code": code, "label": label} for code, label in EVENT_TYPES.items()],
            "periods": list(PERIODS),
        })

    @app.route("/api/preferences", methods=["GET"])
    def get_preferences():
        prefs = app_state.preferences_service.load()
        return jsonify({"success": True, "preferences": prefs.to_json()})

    @app.route("/api/preferences", methods=["POST"])
    def save_preferences():
        try:
            prefs = KeeperPreferences.from_json(_body())
            app_state.preferences_service.save(prefs)
            if prefs.access_token:
                app_state.config.access_token = prefs.access_token
            return jsonify({"success": True, "preferences": prefs.to_json()})
        except (TypeError, OSError) as e:
            return jsonify({"success": False, "error": str(e)}), 400

    # ==================== Game Lifecycle ==================== #

    @app.route("/api/state", methods=["GET"])
    def get_state():
        """Current live game view (clock, score, lineup, playtime, log)."""
        return jsonify({"success": True, "state": live.get_state()})

    @app.route("/api/games", methods=["GET"])
    def list_games():
        try:
            games = live.list_games()
            return jsonify({"success": True, "games": [g.to_json() for g in games]})
        except Exception as e:
            return _error(e)

    @app.route("/api/game/start", methods=["POST"])
    def start_game():
        """Start a new game with this device as the primary keeper."""
        data = _body()
        try:
            session = live.start_new_game(
                game_id=data.get("game_id", ""),
                home_team=data.get("home_team", ""),
                away_team=data.get("away_team", ""),
                home_roster=data.get("home_roster") or [],
                away_roster=data.get("away_roster") or [],
            )
            app_state.preferences_service.update(
                game_id=session.game_id,
                home_team=session.home_team,
                away_team=session.away_team,
                home_roster=data.get("home_roster"),
                away_roster=data.get("away_roster"),
            )
            return jsonify({"success": True, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    @app.route("/api/game/join", methods=["POST"])
    def join_game():
        """Join or resume an existing game as a secondary keeper."""
        data = _body()
        game_id = data.get("game_id")
        if not game_id:
            return jsonify({"success": False, "error": "game_id required"}), 400
        try:
            prefs = app_state.preferences_service.load()
            live.join_game(
                game_id,
                home_roster=data.get("home_roster") or prefs.home_roster,
                away_roster=data.get("away_roster") or prefs.away_roster,
                archive_tab=data.get("archive_tab", ""),
            )
            return jsonify({"success": True, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    @app.route("/api/game/leave", methods=["POST"])
    def leave_game():
        live.leave()
        return jsonify({"success": True, "state": live.get_state()})

    @app.route("/api/game/end", methods=["POST"])
    def end_game():
        try:
            live.end_game(reset_live=bool(_body().get("reset_live", False)))
            return jsonify({"success": True, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    @app.route("/api/starters", methods=["POST"])
    def save_starters():
        data = _body()
        try:
            live.save_starters(data.get("starters_home") or [], data.get("starters_away") or [])
            return jsonify({"success": True, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    # ==================== Clock ==================== #

    @app.route("/api/clock/start", methods=["POST"])
    def start_clock():
        try:
            applied = live.start_clock()
            return jsonify({"success": True, "applied": applied, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    @app.route("/api/clock/stop", methods=["POST"])
    def stop_clock():
        try:
            applied = live.stop_clock()
            return jsonify({"success": True, "applied": applied, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    @app.route("/api/clock/period", methods=["POST"])
    def set_period():
        try:
            event = live.set_period(_body().get("period", ""))
            return jsonify({"success": True, "applied": event is not None, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    @app.route("/api/clock/set", methods=["POST"])
    def set_clock():
        data = _body()
        if "clock" not in data:
            return jsonify({"success": False, "error": "clock required"}), 400
        try:
            event = live.set_clock(data["clock"])
            return jsonify({"success": True, "applied": event is not None, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    @app.route("/api/clock/adjust", methods=["POST"])
    def adjust_clock():
        try:
            event = live.adjust_clock(_body().get("delta", 0))
            return jsonify({"success": True, "applied": event is not None, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    # ==================== Stats & Substitutions ==================== #

    @app.route("/api/stat", methods=["POST"])
    def record_stat():
        data = _body()
        try:
            event = live.record_stat(
                team=data.get("team", ""),
                player_id=data.get("player_id", ""),
                event_type=data.get("event_type", ""),
                delta=data.get("delta", 1),
            )
            return jsonify({"success": True, "event_id": event.event_id, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    @app.route("/api/substitution", methods=["POST"])
    def make_substitution():
        """Make a player substitution."""
        data = _body()
        player_out = data.get("player_out")
        player_in = data.get("player_in")
        if not player_out or not player_in:
            return jsonify({"success": False, "error": "Both player_out and player_in required"}), 400
        try:
            result, event = live.substitute(data.get("team", ""), player_out, player_in)
            if not result.ok:
                return jsonify({"success": False, "error": result.reason}), 400
            return jsonify({"success": True, "event_id": event.event_id, "state": live.get_state()})
        except Exception as e:
            return _error(e)

    return app


def run_web_app(config: Optional[AppConfig] = None) -> None:
    """
    Run the web application.

    Args:
        config: Settings to use (loaded from the environment if omitted)
    """
    config = config or load_config()
    app = create_app(WebAppState(config))
    log.info("Serving %s on %s:%s", APP_TITLE, config.web_host, config.web_port)
    try:
        app.run(host=config.web_host, port=config.web_port, debug=False)
    finally:
        app.config["HOOPSYNC_STATE"].live_session.shutdown()


if __name__ == "__main__":
    run_web_app()
