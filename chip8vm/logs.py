"""
Logging setup for the interpreter and its tools.

Each concern logs to its own logger (chip8vm.input, chip8vm.instr,
chip8vm.draw, chip8vm.timer, chip8vm.driver) so traces can be switched on
selectively.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DEBUG_FORMAT = "%(name)s: %(message)s"


def debug_log_name(rom_path: str) -> str:
    name = os.path.splitext(os.path.basename(rom_path))[0]
    return f"chip8_debug_{name}.log"


def configure_logging(level: int = logging.WARNING, debug_file: Optional[str] = None) -> logging.Logger:
    """
    Install a console handler on the chip8vm logger and, optionally, a file
    handler that receives everything down to DEBUG.
    """
    root = logging.getLogger("chip8vm")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)
    root.setLevel(level)

    if debug_file:
        file_handler = logging.FileHandler(debug_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
        root.addHandler(file_handler)
        root.setLevel(logging.DEBUG)

    return root
