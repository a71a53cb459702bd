import sys
import types

import pytest

from selection_translator import input_listener
from selection_translator.input_listener import backend_order, create_input_backends, pynput_hotkey
from selection_translator.shortcuts import parse_shortcut


@pytest.mark.parametrize("text, expected", [
    ("Ctrl+Alt+L", "<ctrl>+<alt>+l"),
    ("Super+Shift+F9", "<shift>+<cmd>+<f9>"),
    ("Alt+ArrowUp", "<alt>+<up>"),
    ("Ctrl+PageDown", "<ctrl>+<page_down>"),
    ("Ctrl+7", "<ctrl>+7"),
])
def test_pynput_hotkey_strings(text, expected):
    assert pynput_hotkey(parse_shortcut(text)) == expected


def test_explicit_backend_is_used_alone():
    assert backend_order("evdev") == ["evdev"]
    assert backend_order(" PYNPUT ") == ["pynput"]


def test_auto_prefers_evdev_on_wayland(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setenv("XDG_SESSION_TYPE", "wayland")

    assert backend_order("auto") == ["evdev", "pynput"]


def test_auto_prefers_pynput_elsewhere(monkeypatch):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.delenv("XDG_SESSION_TYPE", raising=False)

    assert backend_order(None) == ["pynput", "evdev"]


def test_unknown_backend_is_reported():
    with pytest.raises(RuntimeError) as excinfo:
        create_input_backends("carrier-pigeon")

    assert "carrier-pigeon" in str(excinfo.value)


def test_falls_back_to_next_backend(monkeypatch):
    class Broken:
        def __init__(self):
            raise OSError("no display")

    class Working:
        pass

    monkeypatch.setattr(input_listener, "PynputHotkeyBackend", Broken)
    monkeypatch.setattr(input_listener, "PynputCopySimulator", Working)
    fake = types.ModuleType("selection_translator.evdev_backend")
    fake.EvdevHotkeyBackend = Working
    fake.UInputCopySimulator = Working
    monkeypatch.setitem(sys.modules, "selection_translator.evdev_backend", fake)
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("XDG_SESSION_TYPE", raising=False)

    hotkeys, copier = create_input_backends("auto")

    assert isinstance(hotkeys, Working)
    assert isinstance(copier, Working)
