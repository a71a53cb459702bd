
import threading

from selection_translator.errors import RegistrationError
from selection_translator.logging_config import get_logger
from selection_translator.shortcuts import parse_shortcut

logger = get_logger(__name__)


class ShortcutRegistry:
    """
    Owns the single active global shortcut.

    Every change goes through `replace_active_shortcut`, which unregisters
    the old binding and registers the new one inside one critical section,
    so the stored spec always matches what the OS facility has live.
    """

    def __init__(self, backend, callback):
        self.backend = backend
        self.callback = callback
        self._lock = threading.Lock()
        self._active = None

    @property
    def active(self):
        with self._lock:
            return self._active

    def update_shortcut(self, text):
        """Parses `text` and makes it the active shortcut. Returns the new spec."""
        spec = parse_shortcut(text)
        self.replace_active_shortcut(spec)
        return spec

    def replace_active_shortcut(self, new_spec):
        with self._lock:
            previous = self._active
            if previous is not None:
                self._unregister_quietly(previous)

            try:
                self.backend.register(new_spec, self.callback)
            except Exception as ex:
                if previous is not None:
                    self._restore(previous)
                if isinstance(ex, RegistrationError):
                    raise
                raise RegistrationError(new_spec, str(ex)) from ex

            self._active = new_spec
            logger.info("Active shortcut is now %s", new_spec)

    def clear(self):
        """Unregisters the active shortcut, if any (used on shutdown)."""
        with self._lock:
            if self._active is not None:
                self._unregister_quietly(self._active)
                self._active = None

    def _unregister_quietly(self, spec):
        # Best effort: a failed unregister never blocks the swap
        try:
            self.backend.unregister(spec)
        except Exception as ex:
            logger.warning("Failed to unregister shortcut %s: %s", spec, ex)

    def _restore(self, previous):
        try:
            self.backend.register(previous, self.callback)
        except Exception as ex:
            logger.error("Could not restore previous shortcut %s: %s", previous, ex)
            self._active = None
