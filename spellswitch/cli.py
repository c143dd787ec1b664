#!/usr/bin/env python3
"""
SpellSwitch CLI entry point with enhanced logging

    spellswitch resolve es-MX          # which dictionary would be used
    spellswitch check --lang de Eimer  # misspellings and corrections
    spellswitch watch < notes.txt      # follow the language line by line
    spellswitch config set debounce_delay 1.5
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.handlers
import os
import sys
import traceback
from pathlib import Path

import spellswitch.log  # registers TRACE level and logger.trace()
from spellswitch.__version__ import __version__

# Global logger instance
logger = None


def setup_logging(debug: bool = False, log_file: str | None = None) -> logging.Logger:
    """Setup logging to both console and file

    Args:
        debug: Enable debug level logging
        log_file: Path to log file (default: ~/.spellswitch.log)
    """
    global logger

    if logger is not None:
        return logger

    logger = logging.getLogger('spellswitch')
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    if log_file is None:
        log_file = os.path.expanduser('~/.spellswitch.log')

    fmt = logging.Formatter(
        '[%(asctime)s] %(levelname)-8s %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # File handler (rotate log file when it gets too large)
    try:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        logger.addHandler(file_handler)
    except OSError as e:
        print(f"Warning: Could not setup file logging: {e}", file=sys.stderr)

    # Console handler (only warnings in production, all in debug)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    console_handler.setFormatter(fmt)
    logger.addHandler(console_handler)

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='spellswitch',
        description='Adaptive spell checking that follows the language being typed',
    )
    parser.add_argument('--debug', action='store_true', help='Enable debug mode with verbose logging')
    parser.add_argument('--config', type=str, default=None, help='Path to config file')
    parser.add_argument('--logfile', type=str, default=None,
                        help='Path to log file (default: ~/.spellswitch.log)')
    parser.add_argument('--version', action='version', version='%(prog)s ' + __version__)

    sub = parser.add_subparsers(dest='command', required=True)

    p_resolve = sub.add_parser('resolve', help='Resolve a language code to an available dictionary')
    p_resolve.add_argument('code')
    p_resolve.add_argument('--cache-only', action='store_true',
                           help='Only make sure the dictionary is cached, print its path')

    p_check = sub.add_parser('check', help='Check words against a language')
    p_check.add_argument('--lang', required=True)
    p_check.add_argument('words', nargs='+')

    p_watch = sub.add_parser('watch', help='Read text lines from stdin and report language changes')
    p_watch.add_argument('--settle-timeout', type=float, default=30.0,
                         help='Seconds to wait for the last evaluation after EOF')

    p_config = sub.add_parser('config', help='Show or change saved settings')
    config_sub = p_config.add_subparsers(dest='action')
    config_sub.add_parser('show', help='Print the effective settings (default)')
    p_set = config_sub.add_parser('set', help='Validate and save one setting')
    p_set.add_argument('key')
    p_set.add_argument('value', help='JSON value; anything else is taken as a string')
    config_sub.add_parser('reset', help='Save the default settings')
    return parser


async def _stdin_lines():
    while True:
        line = await asyncio.to_thread(sys.stdin.readline)
        if not line:
            return
        yield line.rstrip('\n')


async def _cmd_resolve(handler, args) -> int:
    resolution = await handler.resolve(args.code, cache_only=args.cache_only)
    if not resolution.available:
        print(f"{args.code}: no dictionary available")
        return 2
    if isinstance(resolution.dictionary, str):
        print(f"{args.code} -> {resolution.language} ({resolution.dictionary})")
    else:
        print(f"{args.code} -> {resolution.language} ({len(resolution.dictionary)} bytes)")
    return 0


async def _cmd_check(handler, args) -> int:
    change = await handler.switch_language(args.lang)
    if not handler.checker.bound:
        print(f"{args.lang}: no dictionary available")
        return 2
    if change is not None and change.language != change.requested:
        print(f"using {change.language} for {change.requested}")
    status = 0
    for word in args.words:
        if handler.is_misspelled(word):
            status = 1
            suggestions = handler.get_corrections_for_misspelling(word) or []
            print(f"{word}: misspelled" + (f" ({', '.join(suggestions[:5])})" if suggestions else ""))
        else:
            print(f"{word}: ok")
    return status


async def _print_changes(changes) -> None:
    async for change in changes:
        if change.available:
            print(f"language: {change.language} (detected {change.requested})", flush=True)
        else:
            print(f"language: {change.language} (no dictionary, checking disabled)", flush=True)


async def _cmd_watch(handler, args) -> int:
    from spellswitch.core.states import State

    changes = handler.attach()
    printer = asyncio.create_task(_print_changes(changes))
    async for line in _stdin_lines():
        handler.switcher.on_text(line)

    loop = asyncio.get_running_loop()
    deadline = loop.time() + args.settle_timeout
    while handler.state is State.EVALUATING and loop.time() < deadline:
        await asyncio.sleep(0.1)

    await handler.detach()
    await printer
    return 0


def _parse_value(raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _cmd_config(manager, args) -> int:
    """Show, change or reset the settings file. Runs without an event loop."""
    from spellswitch.config import DEFAULT_CONFIG

    action = args.action or 'show'
    if action == 'show':
        print(f"# {manager.config_path}")
        for key, value in sorted(manager.get_all().items()):
            print(f"{key} = {json.dumps(value)}")
        return 0

    if action == 'reset':
        manager.reset_to_defaults()
    else:
        if args.key not in DEFAULT_CONFIG:
            print(f"unknown setting: {args.key}", file=sys.stderr)
            return 2
        manager.set(args.key, _parse_value(args.value))
        if not manager.validate():
            print(f"invalid value for {args.key}: {args.value}", file=sys.stderr)
            return 2

    if not manager.save():
        return 1
    print(f"saved {manager.config_path}")
    return 0


COMMANDS = {
    'resolve': _cmd_resolve,
    'check': _cmd_check,
    'watch': _cmd_watch,
}


async def _run(config: dict, args) -> int:
    from spellswitch.handler import SpellCheckHandler

    handler = SpellCheckHandler.from_config(config)
    async with handler:
        return await COMMANDS[args.command](handler, args)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for SpellSwitch"""
    parser = build_parser()
    args = parser.parse_args(argv)

    log = setup_logging(debug=args.debug, log_file=args.logfile)
    log.debug("SpellSwitch %s, command %s, PID %d", __version__, args.command, os.getpid())

    from spellswitch.config import ConfigManager

    manager = ConfigManager(args.config, debug=args.debug)
    if args.command == 'config':
        return _cmd_config(manager, args)

    config = manager.get_all()
    if args.debug:
        config['debug'] = True

    try:
        return asyncio.run(_run(config, args))
    except KeyboardInterrupt:
        log.info("Terminated by user (Ctrl+C)")
        return 130
    except Exception as e:
        log.error("Unhandled error: %s: %s", type(e).__name__, e)
        log.debug(traceback.format_exc())
        return 1


if __name__ == '__main__':
    sys.exit(main())
