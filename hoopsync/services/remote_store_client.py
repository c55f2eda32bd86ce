"""
Transport to the remote spreadsheet store.

Writes are POSTed JSON whose response is never inspected. Reads are GETs
answered as ``callback({...})`` script bodies, unwrapped here and parsed
into the typed messages of ``models.api_messages``.
"""
import json
import re
import secrets
from typing import Any, List, Optional

import requests

from ..config import AppConfig
from ..errors import ProtocolError, RemoteStoreError
from ..models import GameSummary, LiveSnapshot, ReadQuery, StoredGame, WriteRequest
from ..models.api_messages import parse_game_state, parse_games, parse_live_snapshot
from ..utils import get_logger

log = get_logger(__name__)

_CALLBACK_RE = re.compile(r"^\s*(?:/\*\*/)?\s*([A-Za-z_$][\w$.]*)\s*\((.*)\)\s*;?\s*$", re.DOTALL)


def unwrap_callback(body: str, callback: Optional[str] = None) -> Any:
    """
    Decode a callback-wrapped JSON body; bare JSON is accepted too.

    Raises:
        ProtocolError: If the body is not valid JSON or names another callback
    """
    text = body.strip()
    match = _CALLBACK_RE.match(text)
    if match:
        if callback and match.group(1) != callback:
            raise ProtocolError(f"Unexpected callback {match.group(1)!r}")
        text = match.group(2)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Response is not JSON: {e}") from e


class RemoteStoreClient:
    """
    HTTP client for the store's write and read endpoints.

    Every call has a bounded timeout; failures surface as
    ``RemoteStoreError`` (or its ``UnauthorizedError`` subclass) and are
    never retried here.
    """

    def __init__(self, config: AppConfig, http: Optional[requests.Session] = None):
        self.config = config
        self.http = http or requests.Session()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def post(self, request: WriteRequest) -> None:
        """Send one write; only transport failures are reported."""
        self.config.require_remote()
        payload = request.to_payload(self.config.access_token)
        try:
            response = self.http.post(
                self.config.base_url,
                data=json.dumps(payload),
                headers={"Content-Type": "application/json"},
                timeout=self.config.write_timeout_sec,
            )
            response.raise_for_status()
        except requests.Timeout as e:
            raise RemoteStoreError(f"{request.ACTION} timed out") from e
        except requests.RequestException as e:
            raise RemoteStoreError(f"{request.ACTION} failed: {e}") from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def read(self, query: ReadQuery) -> Any:
        """
        Perform one read and return the decoded (unvalidated) body.

        Raises:
            RemoteStoreError: On timeout, load failure or HTTP error
            ProtocolError: If the body cannot be decoded
        """
        self.config.require_remote()
        callback = "cb_" + secrets.token_hex(6)
        params = query.to_params(self.config.access_token)
        params["callback"] = callback
        try:
            response = self.http.get(
                self.config.base_url,
                params=params,
                timeout=self.config.read_timeout_sec,
            )
            response.raise_for_status()
        except requests.Timeout as e:
            raise RemoteStoreError(f"{query.action} timed out") from e
        except requests.RequestException as e:
            raise RemoteStoreError(f"{query.action} load error: {e}") from e

        if not response.text:
            raise RemoteStoreError(f"No response ({query.action}).")
        return unwrap_callback(response.text, callback)

    def list_games(self) -> List[GameSummary]:
        return parse_games(self.read(ReadQuery.list_games()))

    def get_game_state(self, game_id: str) -> StoredGame:
        return parse_game_state(
            self.read(ReadQuery.game_state(game_id)),
            default_clock_sec=self.config.period_length_sec,
        )

    def get_live_snapshot(self, game_id: str, since_pbp_seq: int) -> LiveSnapshot:
        return parse_live_snapshot(self.read(ReadQuery.live_snapshot(game_id, since_pbp_seq)))
