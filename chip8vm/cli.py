#!/usr/bin/env python3
"""
Headless CHIP-8 ROM runner
Loads a ROM, runs it for a number of cycles (or seconds of real time) and
reports the final machine state, optionally with a text dump or PNG of the
display.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .constants import DEFAULT_INSTRUCTION_FREQUENCY
from .display import render_text, save_display_png
from .driver import Chip8Driver
from .errors import Chip8Error
from .logs import configure_logging, debug_log_name

logger = logging.getLogger("chip8vm.cli")


def parse_key(value: str) -> int:
    try:
        key = int(value, 16)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a hex key: {value!r}")
    if not 0 <= key <= 0xF:
        raise argparse.ArgumentTypeError(f"key out of range 0-F: {value!r}")
    return key


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='chip8vm', description='Run a CHIP-8 ROM headless')
    parser.add_argument('rom', help='ROM file to run')
    parser.add_argument('--cycles', type=int, default=5000, help='Number of cycles to run')
    parser.add_argument('--frequency', type=float, default=DEFAULT_INSTRUCTION_FREQUENCY,
                        help='Instruction frequency in Hz (sets the timer cadence)')
    parser.add_argument('--realtime', type=float, metavar='SECONDS',
                        help='Run paced in wall-clock time instead of a cycle count')

    quirks = parser.add_argument_group('quirks')
    quirks.add_argument('--jumping', action='store_true', help='Bnnn adds vX instead of v0')
    quirks.add_argument('--shifting', action='store_true', help='8xy6/8xyE shift vX in place')
    quirks.add_argument('--no-logic', action='store_true', help='8xy1/8xy2/8xy3 leave vF alone')
    quirks.add_argument('--no-memory-increment', action='store_true',
                        help='Fx55/Fx65 leave I unchanged')

    parser.add_argument('--continue-on-decode-error', action='store_true',
                        help='Skip unknown opcodes instead of halting')
    parser.add_argument('--keys', type=parse_key, nargs='*', default=[],
                        help='Hex keys held down for the whole run')
    parser.add_argument('--debug', action='store_true',
                        help='Write a full trace to chip8_debug_<rom>.log')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log progress to the console')
    parser.add_argument('--show', action='store_true', help='Print the final display as text')
    parser.add_argument('--screenshot', help='Save the final display as a PNG')
    parser.add_argument('--scale', type=int, default=8, help='Screenshot scale factor')
    parser.add_argument('--stats', action='store_true', help='Print instrumentation statistics')
    parser.add_argument('--trace', type=int, default=0, metavar='N',
                        help='Print the last N executed instructions')
    return parser


def quirks_from_args(args) -> dict:
    return {
        'jumping': args.jumping,
        'shifting': args.shifting,
        'logic': not args.no_logic,
        'memory': not args.no_memory_increment,
    }


def print_report(driver: Chip8Driver, args):
    snapshot = driver.snapshot()

    print("Execution completed!")
    print(f"Cycles run: {driver.cycles_executed}")
    print(f"Program counter: 0x{snapshot.program_counter:03X}")
    print(f"I: 0x{snapshot.index_register:03X}")
    print(f"Registers: {snapshot.format_registers()}")
    print(f"Mode: {snapshot.mode}")
    print(f"Emulator crashed: {driver.crashed}")
    if driver.last_error is not None:
        print(f"Error: {driver.last_error}")

    if args.stats:
        print("CHIP-8 Emulator Statistics:")
        print("-" * 30)
        for key, value in driver.get_stats().items():
            print(f"{key:25s}: {value}")

    if args.trace:
        print(f"Last {args.trace} instructions:")
        for entry in snapshot.history[-args.trace:]:
            print(f"  {entry}")

    display, _ = driver.read_display()
    if args.show:
        print("\nDisplay output:")
        print(render_text(display))

    if args.screenshot:
        path = save_display_png(display, args.screenshot, scale=args.scale)
        print(f"Screenshot saved to: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    debug_file = debug_log_name(args.rom) if args.debug else None
    configure_logging(logging.INFO if args.verbose else logging.WARNING, debug_file)
    if debug_file:
        print(f"Debug output will be written to: {debug_file}")

    try:
        driver = Chip8Driver(
            quirks=quirks_from_args(args),
            instruction_frequency=args.frequency,
            history_size=max(args.trace, 64),
            halt_on_decode_error=not args.continue_on_decode_error,
        )
        print(f"Loading ROM: {args.rom}")
        size = driver.load_rom(args.rom)
        print(f"Loaded ROM: {size} bytes")
    except Chip8Error as e:
        print(f"Error loading ROM: {e}", file=sys.stderr)
        return 1

    for key in args.keys:
        driver.key_down(key)

    try:
        if args.realtime is not None:
            driver.run_realtime(duration=args.realtime)
        else:
            driver.run(max_cycles=args.cycles)
    except KeyboardInterrupt:
        print("\nRun interrupted by user")

    print_report(driver, args)
    return 1 if driver.crashed else 0


if __name__ == "__main__":
    sys.exit(main())
