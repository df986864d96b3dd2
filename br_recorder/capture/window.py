"""Locate the game window and grab its client area.

Window lookup uses the Win32 API (pywin32); pixels are grabbed with mss from
the window's on-screen client rectangle, so the game must not be covered.
"""
from __future__ import annotations

import logging
from typing import Dict

import mss
import mss.exception
import numpy as np

try:
    import win32gui
except ImportError:
    win32gui = None

from br_recorder.errors import (CaptureError, WindowHandleInvalidError,
                                WindowMinimizedError, WindowNotFoundError)

logger = logging.getLogger(__name__)

WindowHandle = int


def _require_win32():
    if win32gui is None:
        raise WindowNotFoundError("Window lookup needs pywin32 (Windows only): pip install pywin32")


def client_rect(hwnd: WindowHandle) -> Dict[str, int]:
    """Client area of ``hwnd`` as an mss monitor dict in screen coordinates."""
    try:
        left, top, right, bottom = win32gui.GetClientRect(hwnd)
        left, top = win32gui.ClientToScreen(hwnd, (left, top))
        right, bottom = win32gui.ClientToScreen(hwnd, (right, bottom))
    except win32gui.error as e:
        raise WindowHandleInvalidError(f"Window handle {hwnd} is no longer valid: {e}") from e
    return {"top": top, "left": left, "width": right - left, "height": bottom - top}


class WindowCapture:
    """Capture provider for a top-level window identified by its title."""

    def find_window(self, title: str) -> WindowHandle:
        _require_win32()
        hwnd = win32gui.FindWindow(None, title)
        if not hwnd:
            raise WindowNotFoundError(f"Unable to find {title}'s window.")
        logger.info("Found window %r (hwnd=%s)", title, hwnd)
        return hwnd

    def capture(self, hwnd: WindowHandle) -> np.ndarray:
        """Grab the client area of ``hwnd``.

        Returns:
            BGRA frame as numpy array (H, W, 4)
        """
        _require_win32()
        if not win32gui.IsWindow(hwnd):
            raise WindowHandleInvalidError(f"Window handle {hwnd} is no longer valid.")
        if win32gui.IsIconic(hwnd):
            raise WindowMinimizedError("The window is minimized.")

        monitor = client_rect(hwnd)
        if monitor["width"] <= 0 or monitor["height"] <= 0:
            raise WindowMinimizedError(f"The window has an empty client area: {monitor}")

        try:
            with mss.mss() as sct:
                return np.array(sct.grab(monitor))
        except mss.exception.ScreenShotError as e:
            raise CaptureError(f"Screen grab failed: {e}") from e
