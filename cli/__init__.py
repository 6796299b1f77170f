"""
VeoStudio CLI Tools

Command-line tools for interacting with the video generation system.

Tools:
- console_view: Terminal rendering of a generation run
"""

from .console_view import ConsoleView, encode_image_file

__all__ = ["ConsoleView", "encode_image_file"]
