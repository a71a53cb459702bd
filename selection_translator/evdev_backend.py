
import os
import select
import threading
import time

import evdev
from evdev import InputDevice, UInput, ecodes

from selection_translator.errors import RegistrationError
from selection_translator.input_listener import CopySimulator, HotkeyBackend
from selection_translator.logging_config import get_logger
from selection_translator.shortcuts import KEY_TABLE, MODIFIER_KEYS

logger = get_logger(__name__)

KEY_DOWN = 1
KEY_UP = 0

STOP_TIMEOUT = 2.0

MODIFIER_CODES = {
    modifier: {ecodes.ecodes[name] for name in names}
    for modifier, (_, names) in MODIFIER_KEYS.items()
}


class EvdevHotkeyListener:
    """Watches every keyboard device for one shortcut and calls back on key down."""

    def __init__(self, spec, callback):
        self.spec = spec
        self.callback = callback
        self.key_code = ecodes.ecodes[KEY_TABLE[spec.key][1]]
        self.devices = []
        self.thread = None
        self._stop = threading.Event()
        self._wake_r = None
        self._wake_w = None

    def find_all_keyboards(self):
        """Finds all devices that look like keyboards and support the hotkey."""
        candidates = []
        try:
            paths = evdev.list_devices()
        except OSError as ex:
            logger.warning("Error scanning input devices: %s", ex)
            return candidates

        for path in paths:
            try:
                dev = InputDevice(path)
            except OSError:
                continue
            try:
                cap_keys = dev.capabilities().get(ecodes.EV_KEY, [])
            except OSError as ex:
                # Unplugged between listing and opening
                logger.debug("Skipping %s: %s", path, ex)
                dev.close()
                continue
            if self.key_code in cap_keys:
                candidates.append(dev)
            else:
                dev.close()
        return candidates

    def start(self):
        self.devices = self.find_all_keyboards()
        if not self.devices:
            raise RegistrationError(
                self.spec,
                "no readable keyboard supports this key "
                "(run with input group permissions)",
            )

        logger.info("Listening for %s on %d device(s)", self.spec, len(self.devices))
        for d in self.devices:
            logger.debug(" - %s (%s)", d.name, d.path)

        self._wake_r, self._wake_w = os.pipe()
        self.thread = threading.Thread(target=self._loop, daemon=True, name=f"evdev-{self.spec}")
        self.thread.start()

    def _held_modifiers(self, held):
        return {m for m, codes in MODIFIER_CODES.items() if held & codes}

    def _loop(self):
        held = set()
        try:
            while not self._stop.is_set():
                r, _, _ = select.select(self.devices + [self._wake_r], [], [], 1.0)
                for dev in r:
                    if self._stop.is_set():
                        return
                    if dev == self._wake_r:
                        continue
                    try:
                        events = list(dev.read())
                    except BlockingIOError:
                        continue
                    except OSError:
                        # Device disconnected
                        self.devices.remove(dev)
                        continue
                    for event in events:
                        if event.type != ecodes.EV_KEY:
                            continue
                        if event.value == KEY_DOWN:
                            held.add(event.code)
                            if (event.code == self.key_code
                                    and self._held_modifiers(held) == self.spec.modifiers
                                    and not self._stop.is_set()):
                                self.callback()
                        elif event.value == KEY_UP:
                            held.discard(event.code)
                if not self.devices:
                    logger.warning("All input devices for %s disconnected", self.spec)
                    break
        except Exception:
            logger.exception("Input listener loop error for %s", self.spec)
        finally:
            for d in self.devices:
                try:
                    d.close()
                except OSError:
                    pass

    def stop(self):
        """Returns once the loop can no longer call back (unless called from it)."""
        self._stop.set()
        if self.thread is None:
            return
        os.write(self._wake_w, b"\0")
        if self.thread is not threading.current_thread():
            self.thread.join(STOP_TIMEOUT)
            if self.thread.is_alive():
                logger.warning("Listener for %s did not stop within %ss", self.spec, STOP_TIMEOUT)
        os.close(self._wake_r)
        os.close(self._wake_w)
        self.thread = None


class EvdevHotkeyBackend(HotkeyBackend):
    """Reads /dev/input directly, so it also works under Wayland (Linux only)."""

    name = "evdev"

    def __init__(self):
        self._listeners = {}

    def register(self, spec, callback):
        if spec in self._listeners:
            raise RegistrationError(spec, "already registered")
        listener = EvdevHotkeyListener(spec, callback)
        listener.start()
        self._listeners[spec] = listener

    def unregister(self, spec):
        listener = self._listeners.pop(spec, None)
        if listener is None:
            logger.debug("Shortcut %s was not registered", spec)
            return
        listener.stop()


class UInputCopySimulator(CopySimulator):
    """Types Ctrl+C through a uinput virtual keyboard."""

    def __init__(self):
        # Needs root or the input group
        self.uinput = UInput()

    def _sim_key_combo(self, modifier_code, key_code):
        self.uinput.write(ecodes.EV_KEY, modifier_code, KEY_DOWN)
        self.uinput.write(ecodes.EV_KEY, key_code, KEY_DOWN)
        self.uinput.syn()
        time.sleep(0.05)

        self.uinput.write(ecodes.EV_KEY, key_code, KEY_UP)
        self.uinput.write(ecodes.EV_KEY, modifier_code, KEY_UP)
        self.uinput.syn()

    def copy_selection(self):
        self._sim_key_combo(ecodes.KEY_LEFTCTRL, ecodes.KEY_C)

    def close(self):
        self.uinput.close()
