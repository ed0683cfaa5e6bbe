"""
Transport interfaces for delivering push requests.

This module provides an abstract base class for issuing the HTTP POST to a
push endpoint, plus a default implementation built on ``requests``.
Responses are returned unmodified; interpreting status codes is left to the
caller.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import requests

from .models import PushRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class PushTransport(ABC):
    """Abstract transport for sending assembled push requests."""

    @abstractmethod
    def send(self, request: PushRequest) -> Any:
        """
        POST a request to its endpoint.

        Args:
            request: The assembled request

        Returns:
            The transport's raw response
        """
        pass


class RequestsTransport(PushTransport):
    """
    Transport that POSTs with a ``requests`` session.

    Without an explicit session each thread gets its own, since batch sends
    call ``send`` from worker threads. A session passed in is shared by all
    threads and must tolerate that.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            timeout: Per-request timeout in seconds.
            session: Optional session shared by every thread.
        """
        self.timeout = timeout
        self._shared_session = session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """The session for the calling thread."""
        if self._shared_session is not None:
            return self._shared_session

        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def send(self, request: PushRequest) -> requests.Response:
        logger.debug("POST %s (%d bytes)", request.endpoint, len(request.body))
        response = self.session.post(
            request.endpoint,
            headers=request.headers,
            data=request.body,
            timeout=self.timeout,
        )
        logger.debug("Push endpoint %s responded %s", request.endpoint, response.status_code)
        return response

    def close(self) -> None:
        """Close every session this transport opened, or the shared one."""
        if self._shared_session is not None:
            self._shared_session.close()
            return

        with self._lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
