"""
Console rendering surface for video generation.

Implements the GenerationView the client drives: status text, an
out-of-quota panel, and the list of downloaded videos. Also holds the
upload adapter that base64-encodes a reference image file.
"""

import base64
import sys
from pathlib import Path
from typing import Optional, TextIO

from services.video_generation import PlayableHandle


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # Clear line
    CLEAR_LINE = "\033[2K\r"


def colored(text: str, color: str) -> str:
    """Apply color to text."""
    return f"{color}{text}{Colors.RESET}"


def progress_bar(percent: float, width: int = 30) -> str:
    """Create a visual progress bar."""
    percent = max(0.0, min(percent, 100.0))
    filled = int(percent / 100 * width)
    bar = "█" * filled + "░" * (width - filled)

    if percent >= 100:
        color = Colors.GREEN
    elif percent >= 50:
        color = Colors.CYAN
    else:
        color = Colors.WHITE

    return colored(f"[{bar}]", color) + f" {percent:5.1f}%"


def encode_image_file(path: Path) -> str:
    """Read an image upload and return its base64 text (empty for an empty file)."""
    data = path.read_bytes()
    return base64.b64encode(data).decode("ascii") if data else ""


def format_size(num_bytes: int) -> str:
    return f"{num_bytes / 1024 / 1024:.1f} MB"


class ConsoleView:
    """GenerationView that writes to a terminal stream."""

    def __init__(self, stream: Optional[TextIO] = None, use_color: Optional[bool] = None):
        self.stream = stream or sys.stdout
        self.use_color = self.stream.isatty() if use_color is None else use_color

        self.busy = False
        self.status = ""
        self.quota_error_visible = False
        self.handles: list[PlayableHandle] = []
        self._progress_line_open = False

    def _paint(self, text: str, color: str) -> str:
        return colored(text, color) if self.use_color else text

    def _write(self, line: str = ""):
        if self._progress_line_open:
            print(file=self.stream)
            self._progress_line_open = False
        print(line, file=self.stream, flush=True)

    def set_busy(self, busy: bool) -> None:
        self.busy = busy

    def show_status(self, status: str) -> None:
        self.status = status
        if status:
            self._write(self._paint(status, Colors.BOLD))

    def show_quota_error(self, visible: bool) -> None:
        self.quota_error_visible = visible
        if not visible:
            return
        self._write(self._paint("════════════════════════════════════════", Colors.YELLOW))
        self._write(self._paint("Out of quota for video generation.", Colors.YELLOW + Colors.BOLD))
        self._write("    Set GEMINI_API_KEY to a key from a paid project and try again.")
        self._write(self._paint("════════════════════════════════════════", Colors.YELLOW))

    def show_media(self, handles: list[PlayableHandle]) -> None:
        self.handles = list(handles)
        for index, handle in enumerate(self.handles, start=1):
            location = handle.uri if handle.path is not None else f"<in memory, {handle.mime_type}>"
            self._write(
                f"🎬 Video {index}: {self._paint(location, Colors.CYAN)} "
                f"{self._paint(f'({format_size(handle.size_bytes)})', Colors.DIM)}"
            )

    def on_progress(self, request_id: str, percent: int, message: str) -> None:
        """Progress callback for the client; redraws a single line."""
        if not self.use_color:
            return
        print(
            f"{Colors.CLEAR_LINE}⏳ {progress_bar(percent)} {colored(message[:40], Colors.WHITE)}",
            end="",
            file=self.stream,
            flush=True,
        )
        self._progress_line_open = True
