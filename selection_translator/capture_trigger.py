"""
Hotkey callback: copy the current selection and hand it to the UI.

The sequence is a timing heuristic. A synthetic copy keystroke is sent to
whatever application has focus, a fixed settle delay gives the OS time to
complete the copy, then the clipboard is read. Nothing checks that the copy
actually happened: with no selection, or when the target app ignores the
keystroke, the clipboard still holds whatever was copied before and that
stale text is what gets delivered.
"""

import threading
import time

from selection_translator.event_sink import TRANSLATE_SELECTION
from selection_translator.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SETTLE_DELAY = 0.1


class MainWindow:
    """What the capture pipeline needs from the UI's main window."""

    def show_and_focus(self):
        raise NotImplementedError


class CaptureTrigger:
    def __init__(self, copier, clipboard, window, sink, settle_delay=DEFAULT_SETTLE_DELAY, sleep=time.sleep):
        self.copier = copier
        self.clipboard = clipboard
        self.window = window
        self.sink = sink
        self.settle_delay = settle_delay
        self._sleep = sleep

    def __call__(self):
        """Runs on the OS hotkey thread: start the capture and return at once."""
        thread = threading.Thread(target=self.capture, daemon=True, name="capture-selection")
        thread.start()
        return thread

    def capture(self):
        """Copy -> settle delay -> read clipboard -> show window -> notify."""
        try:
            self.copier.copy_selection()
        except Exception as ex:
            logger.warning("Copy automation failed, reading clipboard anyway: %s", ex)

        self._sleep(self.settle_delay)

        try:
            text = self.clipboard.get_text()
        except Exception as ex:
            logger.warning("Clipboard read failed: %s", ex)
            return None
        if not text or not text.strip():
            # Hotkey pressed with nothing selected
            logger.debug("Clipboard empty after copy, nothing to translate")
            return None

        self.window.show_and_focus()
        self.sink.emit(TRANSLATE_SELECTION, text)
        return text
