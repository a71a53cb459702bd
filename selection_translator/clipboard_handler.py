
import os
import shutil
import subprocess
import sys

import pyperclip

from selection_translator.logging_config import get_logger

logger = get_logger(__name__)


class ClipboardHandler:
    """
    Text access to the system clipboard. On Linux the wl-clipboard, xclip
    or xsel command line tools are preferred; everything else goes through
    pyperclip.
    """

    def __init__(self):
        self.linux = sys.platform.startswith("linux")
        self.session_type = os.environ.get("XDG_SESSION_TYPE", "x11").lower()
        self.wayland = "wayland" in self.session_type

        # Check for tools
        self.wl_copy = shutil.which("wl-copy")
        self.wl_paste = shutil.which("wl-paste")
        self.xclip = shutil.which("xclip")
        self.xsel = shutil.which("xsel")

        if self.linux and self.wayland and not (self.wl_copy and self.wl_paste):
            logger.warning("Wayland detected but wl-clipboard not found. Clipboard may fail.")
        elif self.linux and not self.wayland and not (self.xclip or self.xsel):
            logger.warning("X11 detected but xclip/xsel not found. Falling back to pyperclip.")

    def _read_command(self):
        if not self.linux:
            return None
        if self.wayland and self.wl_paste:
            return [self.wl_paste, "--no-newline"]
        if self.xclip:
            return [self.xclip, "-selection", "clipboard", "-o"]
        if self.xsel:
            return [self.xsel, "--clipboard", "--output"]
        return None

    def _write_command(self):
        if not self.linux:
            return None
        if self.wayland and self.wl_copy:
            return [self.wl_copy]
        if self.xclip:
            return [self.xclip, "-selection", "clipboard", "-i"]
        if self.xsel:
            return [self.xsel, "--clipboard", "--input"]
        return None

    def get_text(self):
        """Reads the clipboard as text. Returns "" when it is empty or unreadable."""
        cmd = self._read_command()
        try:
            if cmd:
                return subprocess.check_output(
                    cmd, text=True, stderr=subprocess.DEVNULL, timeout=2
                )
            return pyperclip.paste() or ""
        except (OSError, subprocess.SubprocessError, pyperclip.PyperclipException) as e:
            logger.warning("Clipboard read error: %s", e)
            return ""

    def set_text(self, text):
        """Writes text to the clipboard. Returns False if that failed."""
        cmd = self._write_command()
        try:
            if cmd:
                subprocess.run(
                    cmd, input=text.encode("utf-8"), check=True,
                    stderr=subprocess.DEVNULL, timeout=2,
                )
            else:
                pyperclip.copy(text)
        except (OSError, subprocess.SubprocessError, pyperclip.PyperclipException) as e:
            logger.warning("Clipboard write error: %s", e)
            return False
        return True
