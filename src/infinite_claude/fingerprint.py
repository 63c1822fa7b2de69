"""
Pane fingerprinting.

Captures a window of the session's visible output and reduces it to a
fixed-size digest so that successive polls can be compared cheaply.
"""

import hashlib

from .exceptions import CaptureError
from .protocols import TmuxInterface


# Capture windows, in lines from the bottom of the pane
STABILITY_WINDOW = 100  # overall idle/stuck judgement
STATUS_WINDOW = 30      # task status line ("N tasks (... in progress ...)")
TODO_WINDOW = 20        # todo list markers
ERROR_WINDOW = 30       # error signatures

# Digest of "no content"; never produced by digest()
EMPTY_DIGEST = ""


def capture(tmux: TmuxInterface, session: str, lines: int = STABILITY_WINDOW) -> str:
    """Capture the last `lines` lines of the session.

    Raises:
        CaptureError: If the session is gone or tmux returned nothing
    """
    content = tmux.capture_pane(session, lines)
    if content is None:
        raise CaptureError(session, "tmux returned an error")
    if not content.strip():
        raise CaptureError(session, "pane is empty")
    return content


def digest(text: str) -> str:
    """Fingerprint captured text.

    MD5 is used for cheap equality testing of large blobs, not security.
    """
    return hashlib.md5(text.encode("utf-8", errors="replace")).hexdigest()

