
import argparse
import asyncio
import signal
import sys

from selection_translator.capture_trigger import CaptureTrigger, MainWindow
from selection_translator.clipboard_handler import ClipboardHandler
from selection_translator.config_loader import (
    DEFAULT_CONFIG_PATH,
    get_config_value,
    load_config,
    save_config,
)
from selection_translator.errors import ParseError, RegistrationError, TranslatorError
from selection_translator.event_sink import TRANSLATE_SELECTION, EventSink, LoopSink
from selection_translator.input_listener import create_input_backends
from selection_translator.logging_config import get_logger, setup_logging
from selection_translator.provider_client import ProviderClient
from selection_translator.shortcut_registry import ShortcutRegistry
from selection_translator.shortcuts import format_shortcut
from selection_translator.translator_core import (
    TranslatorCore,
    explanation_request,
    translation_request,
)

logger = get_logger("selection_translator.main")


class ConsoleWindow(MainWindow):
    """Stands in for the GUI main window: the terminal is always 'visible'."""

    def show_and_focus(self):
        print("\n=== Selection captured ===", flush=True)


class ConsoleSink(EventSink):
    """Prints streamed fragments as they arrive."""

    def emit(self, event, payload):
        sys.stdout.write(payload)
        sys.stdout.flush()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Translate the selected text anywhere on the desktop with a global hotkey."
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="path to config.yml")
    parser.add_argument("--shortcut", help='set and save a new shortcut, e.g. "Ctrl+Shift+T"')
    parser.add_argument("--explain", action="store_true", help="also explain every selection")
    return parser.parse_args(argv)


async def handle_selection(core, config, clipboard, text):
    print(f"Original: {text[:50]}...")
    print("--- Translation ---")
    try:
        translated = await core.translate(translation_request(config, text))
    except TranslatorError as e:
        print()
        logger.error("Translation failed: %s", e)
        return
    print()

    if translated and clipboard.set_text(translated):
        print("(copied to clipboard)")

    if get_config_value(config, "translation.explain", False):
        print("--- Explanation ---")
        try:
            await core.explain(explanation_request(config, text))
        except TranslatorError as e:
            logger.error("Explanation failed: %s", e)
        print()


def apply_shortcut(core, shortcut):
    try:
        spec = core.update_shortcut(shortcut)
    except (ParseError, RegistrationError) as e:
        logger.error("Failed to set shortcut '%s': %s", shortcut, e)
        return None
    print(f"Press {format_shortcut(spec)} to translate the current selection.")
    return spec


async def run(args):
    config = load_config(args.config)
    setup_logging(get_config_value(config, "logging.level", "INFO"))
    if args.explain:
        config["translation"]["explain"] = True

    loop = asyncio.get_running_loop()
    selections = LoopSink(loop)
    clipboard = ClipboardHandler()
    hotkeys, copier = create_input_backends(get_config_value(config, "hotkey.backend", "auto"))

    trigger = CaptureTrigger(
        copier,
        clipboard,
        ConsoleWindow(),
        selections,
        settle_delay=float(get_config_value(config, "hotkey.settle_delay", 0.1)),
    )
    registry = ShortcutRegistry(hotkeys, trigger)
    client = ProviderClient(
        timeout=float(get_config_value(config, "provider.timeout", 120)),
        api_key=get_config_value(config, "provider.api_key", ""),
    )
    core = TranslatorCore(client, registry, ConsoleSink())

    if args.shortcut:
        if apply_shortcut(core, args.shortcut):
            config["hotkey"]["shortcut"] = str(registry.active)
            save_config(config, args.config)
    else:
        apply_shortcut(core, get_config_value(config, "hotkey.shortcut"))

    def reload_config():
        logger.info("Reloading %s", args.config)
        config.update(load_config(args.config))
        if args.explain:
            config["translation"]["explain"] = True
        apply_shortcut(core, get_config_value(config, "hotkey.shortcut"))

    sighup = getattr(signal, "SIGHUP", None)
    if sighup is not None:
        loop.add_signal_handler(sighup, reload_config)

    print("\nRunning. Press Ctrl+C to exit.")
    try:
        while True:
            event, text = await selections.queue.get()
            if event == TRANSLATE_SELECTION:
                await handle_selection(core, config, clipboard, text)
    finally:
        registry.clear()
        copier.close()


def main(argv=None):
    print("Starting Selection Translator...")
    args = parse_args(argv)
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nStopping...")
    except (RuntimeError, ValueError) as e:
        # No usable input backend, or an unknown provider in the config
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(0)


if __name__ == "__main__":
    main()
