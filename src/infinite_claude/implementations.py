"""
Real implementations of protocol interfaces.

RealTmux talks to tmux through libtmux. Every method reports failure
through its return value instead of raising, so the monitor loops can log
and carry on when the terminal layer is briefly unavailable.
"""

import logging
import os
import subprocess
import time
from typing import Dict, List, Optional

import libtmux
from libtmux.exc import LibTmuxException
from libtmux._internal.query_list import ObjectDoesNotExist

from .settings import ENV_TMUX_SOCKET


logger = logging.getLogger(__name__)


class RealTmux:
    """Production implementation of TmuxInterface using libtmux.

    Session objects are cached briefly: libtmux spawns a subprocess per
    lookup, and the monitors look up the same session on every poll.
    """

    # Cache TTL in seconds
    _CACHE_TTL = 30.0

    def __init__(self, socket_name: Optional[str] = None):
        """Initialize with optional socket name for test isolation.

        If no socket_name is provided, checks INFINITE_CLAUDE_TMUX_SOCKET.
        """
        self._socket_name = socket_name or os.environ.get(ENV_TMUX_SOCKET)
        self._server: Optional[libtmux.Server] = None
        # Cache: session_name -> (session_obj, timestamp)
        self._session_cache: Dict[str, tuple] = {}

    @property
    def server(self) -> libtmux.Server:
        """Lazy-load the tmux server connection."""
        if self._server is None:
            if self._socket_name:
                self._server = libtmux.Server(socket_name=self._socket_name)
            else:
                self._server = libtmux.Server()
        return self._server

    def _tmux_prefix(self) -> List[str]:
        if self._socket_name:
            return ["tmux", "-L", self._socket_name]
        return ["tmux"]

    def _get_session(self, session: str) -> Optional[libtmux.Session]:
        """Get a session by name, with caching."""
        now = time.time()
        if session in self._session_cache:
            cached_session, cached_time = self._session_cache[session]
            if now - cached_time < self._CACHE_TTL:
                return cached_session

        try:
            sess = self.server.sessions.get(session_name=session)
            self._session_cache[session] = (sess, now)
            return sess
        except (LibTmuxException, ObjectDoesNotExist):
            return None

    def _get_pane(self, session: str) -> Optional[libtmux.Pane]:
        sess = self._get_session(session)
        if sess is None:
            return None
        try:
            return sess.active_pane
        except LibTmuxException:
            self.invalidate_cache(session)
            return None

    def invalidate_cache(self, session: Optional[str] = None) -> None:
        if session is None:
            self._session_cache.clear()
        else:
            self._session_cache.pop(session, None)

    def has_session(self, session: str) -> bool:
        try:
            exists = self.server.has_session(session)
        except LibTmuxException:
            exists = False
        if not exists:
            self.invalidate_cache(session)
        return exists

    def capture_pane(self, session: str, lines: int = 100) -> Optional[str]:
        try:
            pane = self._get_pane(session)
            if pane is None:
                return None
            captured = pane.capture_pane(start=-lines)
            if isinstance(captured, list):
                return '\n'.join(captured)
            return captured
        except LibTmuxException as e:
            # Pane may have been killed since it was cached
            logger.debug("capture_pane(%s) failed: %s", session, e)
            self.invalidate_cache(session)
            return None

    def _send(self, session: str, keys: str, literal: bool) -> bool:
        try:
            pane = self._get_pane(session)
            if pane is None:
                return False
            pane.send_keys(keys, enter=False, suppress_history=False, literal=literal)
            return True
        except LibTmuxException as e:
            logger.debug("send_keys(%s, %r) failed: %s", session, keys, e)
            self.invalidate_cache(session)
            return False

    def send_text(self, session: str, text: str) -> bool:
        # Claude Code needs text and Enter as separate commands, so this
        # never submits
        return self._send(session, text, literal=True)

    def send_submit(self, session: str) -> bool:
        return self._send(session, "Enter", literal=False)

    def send_interrupt(self, session: str) -> bool:
        return self._send(session, "C-c", literal=False)

    def new_session(self, session: str, cwd: Optional[str] = None,
                    command: Optional[List[str]] = None) -> bool:
        kwargs: Dict[str, object] = {'session_name': session, 'attach': False}
        if cwd:
            kwargs['start_directory'] = cwd
        if command:
            kwargs['window_command'] = ' '.join(command)
        try:
            sess = self.server.new_session(**kwargs)
            self._session_cache[session] = (sess, time.time())
            return True
        except LibTmuxException as e:
            logger.debug("new_session(%s) failed: %s", session, e)
            return False

    def kill_session(self, session: str) -> bool:
        try:
            sess = self._get_session(session)
            if sess is None:
                return False
            sess.kill()
            return True
        except LibTmuxException:
            return False
        finally:
            self.invalidate_cache(session)

    def process_alive(self, session: str, pattern: str) -> bool:
        pane = self._get_pane(session)
        if pane is None:
            return False
        try:
            pane_pid = pane.pane_pid
        except LibTmuxException:
            return False
        if not pane_pid:
            return False
        try:
            result = subprocess.run(
                ["pgrep", "-P", str(pane_pid), "-f", pattern],
                capture_output=True,
                timeout=5,
            )
        except (subprocess.SubprocessError, OSError):
            return False
        return result.returncode == 0

    def attach(self, session: str) -> int:
        # Not execlp: the monitor threads have to outlive the attach
        try:
            result = subprocess.run(self._tmux_prefix() + ["attach-session", "-t", session])
        except OSError as e:
            logger.debug("attach(%s) failed: %s", session, e)
            return 1
        return result.returncode
