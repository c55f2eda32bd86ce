"""
Service Factory for dependency injection.

This module builds a live game session with its transport, dispatcher and
scheduling collaborators injected.
"""
from typing import Callable, Optional

import requests

from ..config import AppConfig
from .live_session import LiveGameSession
from .preferences_service import PreferencesService
from .remote_store_client import RemoteStoreClient
from .scheduler import ImmediateDispatcher, RepeatingTask, ThreadDispatcher


class ServiceFactory:
    """
    Factory for creating service instances with their dependencies.

    Singletons (HTTP session, preferences service) are created lazily and
    shared by everything the factory builds.
    """

    def __init__(self, config: AppConfig):
        self.config = config
        self._http: Optional[requests.Session] = None
        self._preferences_service: Optional[PreferencesService] = None

    def create_remote_client(self) -> RemoteStoreClient:
        return RemoteStoreClient(self.config, http=self._get_http())

    def create_live_session(
        self,
        *,
        background: bool = True,
        task_factory: Optional[Callable[..., RepeatingTask]] = None,
        client: Optional[RemoteStoreClient] = None,
    ) -> LiveGameSession:
        """
        Create a LiveGameSession.

        Args:
            background: Send writes from a thread pool; False sends inline
            task_factory: Override for the periodic task class
            client: Override for the remote store client

        Returns:
            Configured LiveGameSession instance
        """
        dispatcher = ThreadDispatcher() if background else ImmediateDispatcher()
        return LiveGameSession(
            self.config,
            client=client or self.create_remote_client(),
            dispatcher=dispatcher,
            task_factory=task_factory or RepeatingTask,
        )

    def get_preferences_service(self) -> PreferencesService:
        """Get singleton preferences service."""
        if self._preferences_service is None:
            self._preferences_service = PreferencesService(self.config.preferences_path)
        return self._preferences_service

    def _get_http(self) -> requests.Session:
        """Get singleton HTTP session."""
        if self._http is None:
            self._http = requests.Session()
        return self._http
