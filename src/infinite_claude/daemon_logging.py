"""
Rich-based logging for the monitors and launcher.

Console lines are short and coloured; the log file gets plain timestamped
lines. Diagnostic (debug) output only goes to the debug file, and only when
diagnostic mode is on, so normal runs show lifecycle and intervention
events only.
"""

import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.theme import Theme


DAEMON_THEME = Theme({
    "info": "cyan",
    "warn": "yellow",
    "error": "bold red",
    "success": "bold green",
    "nudge": "magenta",
    "dim": "dim white",
    "highlight": "bold white",
})


class BaseDaemonLogger:
    """Console + file logger shared by both monitor threads."""

    def __init__(
        self,
        log_file: Optional[Path] = None,
        theme: Optional[Theme] = None,
        debug_file: Optional[Path] = None,
        console: Optional[Console] = None,
    ):
        self.log_file = log_file
        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.debug_file = debug_file
        self.console = console or Console(theme=theme or DAEMON_THEME, highlight=False)
        self.console_enabled = True
        self._lock = threading.Lock()

    @property
    def debug_enabled(self) -> bool:
        return self.debug_file is not None

    def _append(self, path: Path, line: str) -> None:
        try:
            with self._lock:
                with open(path, "a") as f:
                    f.write(line + "\n")
        except OSError:
            pass  # Logging must never take a monitor down

    def _write_to_file(self, message: str, level: str) -> None:
        if self.log_file is None:
            return
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self._append(self.log_file, f"[{timestamp}] [{level}] {message}")

    def _log(self, style: str, label: str, message: str, level: str) -> None:
        self._write_to_file(message, level)
        if self.console_enabled:
            now = datetime.now().strftime("%H:%M:%S")
            self.console.print(f"[dim]{now}[/dim] [{style}]{label:<5}[/{style}] {message}")

    def info(self, message: str) -> None:
        self._log("info", "INFO", message, "INFO")

    def warn(self, message: str) -> None:
        self._log("warn", "WARN", message, "WARN")

    def error(self, message: str) -> None:
        self._log("error", "ERROR", message, "ERROR")

    def success(self, message: str) -> None:
        self._log("success", "OK", message, "INFO")

    def nudge(self, message: str) -> None:
        """Log an intervention; these are always surfaced."""
        self._log("nudge", "NUDGE", message, "INFO")

    def debug(self, message: str) -> None:
        """Record a poll decision. No-op unless diagnostic mode is on."""
        if self.debug_file is None:
            return
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self._append(self.debug_file, f"[{timestamp}] {message}")

    def section(self, title: str) -> None:
        self._write_to_file(f"=== {title} ===", "INFO")
        if self.console_enabled:
            self.console.print()
            self.console.rule(f"[bold]{title}[/bold]", style="dim")

    def init_debug_file(self, **settings) -> None:
        """Truncate the debug file and write a header of effective settings."""
        if self.debug_file is None:
            return
        lines = ["=== Infinite Claude Debug Log ===", f"Started: {datetime.now().isoformat()}"]
        lines.extend(f"{key.upper()}: {value}" for key, value in settings.items())
        lines.append("=" * 40)
        try:
            self.debug_file.parent.mkdir(parents=True, exist_ok=True)
            with self._lock:
                self.debug_file.write_text("\n".join(lines) + "\n")
        except OSError as e:
            self.warn(f"Cannot write debug file {self.debug_file}: {e}")
            self.debug_file = None
            return
        self.info(f"Debug mode enabled, writing to: {self.debug_file}")

    def mute_console(self) -> None:
        """Stop printing to the terminal (e.g. while tmux is attached)."""
        self.console_enabled = False

    def unmute_console(self) -> None:
        self.console_enabled = True
