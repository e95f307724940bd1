"""
Cycle driver for a single CHIP-8 machine.

Owns the Chip8 instance and the ExecutionEngine, paces instructions against
the 60Hz delay timer and serialises every access behind one lock, so a UI
thread can feed keys and read frames while another thread steps the machine.
"""

import logging
import threading
import time
from typing import Dict, Optional

import numpy as np

from .constants import (
    DEFAULT_HISTORY_SIZE, DEFAULT_INSTRUCTION_FREQUENCY, DELAY_TIMER_FREQUENCY,
    LOG_TARGET_DRIVER, LOG_TARGET_TIMER, STACK_LIMIT,
)
from .engine import ExecutionEngine
from .errors import ConfigurationError, DecodeError, FatalError
from .machine import Chip8, MachineSnapshot, RomSource
from .mode import PAUSED, RUNNING, Mode, Paused, Running, WaitForKey

logger = logging.getLogger(LOG_TARGET_DRIVER)
timer_logger = logging.getLogger(LOG_TARGET_TIMER)


def steps_per_timer_tick(instruction_frequency: float, timer_frequency: float) -> int:
    """How many instructions run between two delay timer ticks"""
    return max(1, int(round(instruction_frequency / timer_frequency)))


class Chip8Driver:
    """
    Steps the machine, ticks the timer and exposes the control surface used
    by front-ends (pause/resume, single step, key events, snapshots).

    step() returns False once stepping has stopped for good, either because a
    fatal error crashed the machine or a decode error halted it.
    """

    def __init__(self, quirks: Optional[Dict[str, bool]] = None,
                 instruction_frequency: float = DEFAULT_INSTRUCTION_FREQUENCY,
                 timer_frequency: float = DELAY_TIMER_FREQUENCY,
                 history_size: Optional[int] = DEFAULT_HISTORY_SIZE,
                 stack_limit: Optional[int] = STACK_LIMIT,
                 halt_on_decode_error: bool = True):
        if instruction_frequency <= 0 or timer_frequency <= 0:
            raise ConfigurationError(
                f"frequencies must be positive, got {instruction_frequency} / {timer_frequency}")

        self.instruction_frequency = instruction_frequency
        self.timer_frequency = timer_frequency
        self.steps_per_tick = steps_per_timer_tick(instruction_frequency, timer_frequency)
        self.halt_on_decode_error = halt_on_decode_error

        self.vm = Chip8(history_size=history_size, stack_limit=stack_limit)
        self.engine = ExecutionEngine(quirks)

        self._lock = threading.Lock()
        self._step_requested = False
        self.crashed = False
        self.halted = False
        self.last_error = None
        self.cycles_executed = 0

    @property
    def stopped(self) -> bool:
        return self.crashed or self.halted

    def load_rom(self, rom_data: RomSource) -> int:
        with self._lock:
            return self.vm.load_rom(rom_data)

    # Stepping

    def step(self) -> bool:
        """Execute one instruction if the current mode allows it"""
        with self._lock:
            return self._step_locked()

    def _step_locked(self) -> bool:
        if self.stopped:
            return False

        mode = self.vm.mode
        if isinstance(mode, WaitForKey):
            return True
        if isinstance(mode, Paused):
            if not self._step_requested:
                return True
            self._step_requested = False

        try:
            self.engine.step(self.vm)
            self.cycles_executed += 1
        except DecodeError as e:
            self.last_error = e
            if self.halt_on_decode_error:
                logger.error("ERROR: %s, halting", e)
                self.halted = True
                return False
            logger.warning("skipping %s", e)
        except FatalError as e:
            logger.error("ERROR: %s", e)
            self.last_error = e
            self.crashed = True
            return False
        return True

    def tick_timer(self) -> int:
        """One 60Hz delay timer tick. Frozen while paused."""
        with self._lock:
            if not isinstance(self.vm.mode, Paused):
                self.vm.delay_timer.tick()
            value = self.vm.delay_timer.value
        timer_logger.debug("delay timer: %d", value)
        return value

    def run(self, max_cycles: int = 1000, update_timers: bool = True) -> int:
        """
        Run the driver for up to max_cycles cycles, ticking the timer every
        steps_per_tick cycles. Returns the number of cycles run, including
        cycles spent paused or waiting for a key; cycles_executed only counts
        instructions that actually ran.
        """
        cycle = 0
        for cycle in range(1, max_cycles + 1):
            if not self.step():
                cycle -= 1
                break

            if update_timers and cycle % self.steps_per_tick == 0:
                self.tick_timer()
        return cycle

    def run_realtime(self, duration: Optional[float] = None,
                     stop_event: Optional[threading.Event] = None) -> int:
        """
        Run at instruction_frequency in wall-clock time until stopped, the
        duration elapses or stop_event is set. Returns the number of frames.
        """
        frame_time = 1.0 / self.timer_frequency
        started = time.time()
        frames = 0

        while not self.stopped:
            if stop_event is not None and stop_event.is_set():
                break
            if duration is not None and time.time() - started >= duration:
                break

            frame_start = time.time()
            for _ in range(self.steps_per_tick):
                if not self.step():
                    break
            self.tick_timer()
            frames += 1

            # Maintain roughly timer_frequency frames per second
            elapsed = time.time() - frame_start
            time.sleep(max(0.0, frame_time - elapsed))

        return frames

    def stop(self):
        """Stop stepping; the run loops return at their next check"""
        with self._lock:
            self.halted = True

    # Control surface

    def set_mode(self, mode: Mode) -> bool:
        """
        Switch between Running and Paused. Requests made while an Fx0A wait is
        pending are ignored; returns whether the mode changed.
        """
        if not isinstance(mode, (Running, Paused)):
            raise ConfigurationError(f"cannot request mode {mode}")
        with self._lock:
            return self._set_mode_locked(mode)

    def _set_mode_locked(self, mode: Mode) -> bool:
        if isinstance(self.vm.mode, WaitForKey):
            logger.info("ignoring %s request while waiting for a key", mode)
            return False
        changed = self.vm.mode != mode
        self.vm.mode = mode
        self._step_requested = False
        if changed:
            logger.info("mode -> %s", mode)
        return changed

    def pause(self) -> bool:
        return self.set_mode(PAUSED)

    def resume(self) -> bool:
        return self.set_mode(RUNNING)

    def toggle_pause(self) -> bool:
        with self._lock:
            paused = isinstance(self.vm.mode, Paused)
            return self._set_mode_locked(RUNNING if paused else PAUSED)

    def request_step(self) -> bool:
        """Allow exactly one more instruction while paused"""
        with self._lock:
            if not isinstance(self.vm.mode, Paused):
                logger.warning("step request ignored, machine is %s", self.vm.mode)
                return False
            self._step_requested = True
            return True

    def key_down(self, key: int):
        with self._lock:
            self.vm.key_down(key)

    def key_up(self, key: int):
        with self._lock:
            self.vm.key_up(key)

    # Introspection

    def snapshot(self) -> MachineSnapshot:
        with self._lock:
            return self.vm.snapshot()

    def read_display(self):
        """Copy of the display and the redraw flag, read together"""
        with self._lock:
            return self.vm.get_display(), self.vm.redraw

    def take_frame(self) -> Optional[np.ndarray]:
        """Copy of the display if it changed since the last frame, else None"""
        with self._lock:
            if not self.vm.redraw:
                return None
            frame = self.vm.get_display()
            self.vm.redraw = False
            return frame

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return self.engine.get_stats()
