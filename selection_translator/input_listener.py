
import os
import sys

from selection_translator.errors import RegistrationError
from selection_translator.logging_config import get_logger
from selection_translator.shortcuts import KEY_TABLE, MODIFIER_KEYS

logger = get_logger(__name__)

BACKENDS = ("pynput", "evdev")


class HotkeyBackend:
    """
    An OS-level global hotkey facility. `callback` is invoked on the
    facility's own delivery thread and must return quickly.
    """

    name = "base"

    def register(self, spec, callback):
        raise NotImplementedError

    def unregister(self, spec):
        raise NotImplementedError


class CopySimulator:
    """Sends the platform's "copy selection" keystroke to the focused app."""

    def copy_selection(self):
        raise NotImplementedError

    def close(self):
        pass


def pynput_hotkey(spec):
    """ShortcutSpec -> pynput hotkey string, e.g. '<ctrl>+<alt>+l'."""
    tokens = [MODIFIER_KEYS[m][0] for m in spec.ordered_modifiers]
    tokens.append(KEY_TABLE[spec.key][0])
    return "+".join(tokens)


class PynputHotkeyBackend(HotkeyBackend):
    """One pynput GlobalHotKeys listener per registered shortcut (X11, Windows, macOS)."""

    name = "pynput"

    def __init__(self):
        from pynput import keyboard

        self._keyboard = keyboard
        self._listeners = {}

    def register(self, spec, callback):
        if spec in self._listeners:
            raise RegistrationError(spec, "already registered")
        try:
            listener = self._keyboard.GlobalHotKeys({pynput_hotkey(spec): callback})
            listener.daemon = True
            listener.start()
            listener.wait()
        except Exception as ex:
            raise RegistrationError(spec, str(ex)) from ex
        if not listener.is_alive():
            raise RegistrationError(spec, "hotkey listener stopped during startup")
        self._listeners[spec] = listener
        logger.info("Registered global shortcut %s", spec)

    def unregister(self, spec):
        listener = self._listeners.pop(spec, None)
        if listener is None:
            logger.debug("Shortcut %s was not registered", spec)
            return
        listener.stop()
        logger.info("Unregistered global shortcut %s", spec)


class PynputCopySimulator(CopySimulator):
    """Cmd+C on macOS, Ctrl+C elsewhere, through pynput's keyboard controller."""

    def __init__(self):
        from pynput import keyboard

        self._controller = keyboard.Controller()
        self._modifier = keyboard.Key.cmd if sys.platform == "darwin" else keyboard.Key.ctrl

    def copy_selection(self):
        with self._controller.pressed(self._modifier):
            self._controller.tap("c")


def backend_order(preference="auto"):
    preference = (preference or "auto").strip().lower()
    if preference != "auto":
        return [preference]
    # pynput cannot see global keys under Wayland, evdev reads the devices directly
    session = os.environ.get("XDG_SESSION_TYPE", "").lower()
    if sys.platform.startswith("linux") and "wayland" in session:
        return ["evdev", "pynput"]
    return ["pynput", "evdev"]


def create_input_backends(preference="auto"):
    """
    Returns (hotkey_backend, copy_simulator) from the first backend that
    starts, trying them in `backend_order(preference)`.
    """
    errors = []
    for candidate in backend_order(preference):
        try:
            if candidate == "pynput":
                backends = PynputHotkeyBackend(), PynputCopySimulator()
            elif candidate == "evdev":
                from selection_translator.evdev_backend import EvdevHotkeyBackend, UInputCopySimulator

                backends = EvdevHotkeyBackend(), UInputCopySimulator()
            else:
                raise ValueError(f"Unsupported hotkey backend '{candidate}'")
        except Exception as ex:
            errors.append(f"{candidate}: {ex}")
            continue
        logger.info("Using %s input backend", candidate)
        return backends

    raise RuntimeError("Unable to start an input backend. " + " | ".join(errors))
