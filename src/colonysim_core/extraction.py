# src/colonysim_core/extraction.py
"""
Extractor yield curve.

An extractor program's output per cycle decays over the life of the program and
carries a deterministic wobble made of three cosines. Time is measured in ticks of
10**7 per second, and the x axis of the curve is in units of 900-second bars.
"""
import logging
from datetime import datetime, timedelta
from typing import Union

import numpy as np

logger = logging.getLogger(__name__)

TICKS_PER_SECOND = 10_000_000
DECAY_FACTOR = 0.012
NOISE_FACTOR = 0.8
F1 = 1.0 / 12.0
F2 = 1.0 / 5.0
F3 = 1.0 / 2.0

Duration = Union[timedelta, float, int]


def _to_ticks(duration: Duration) -> int:
    seconds = duration.total_seconds() if isinstance(duration, timedelta) else float(duration)
    return int(seconds * TICKS_PER_SECOND)


def _output_for_cycles(base_value: int, cycle_ticks: int, cycle_numbers: np.ndarray) -> np.ndarray:
    bar_width = cycle_ticks / TICKS_PER_SECOND / 900.0
    t = (cycle_numbers + 0.5) * bar_width

    decay_value = base_value / (1.0 + t * DECAY_FACTOR)
    phase_shift = float(base_value) ** 0.7

    sin_a = np.cos(phase_shift + t * F1)
    sin_b = np.cos(phase_shift / 2.0 + t * F2)
    sin_c = np.cos(t * F3)
    sin_stuff = np.maximum((sin_a + sin_b + sin_c) / 3.0, 0.0)

    bar_height = decay_value * (1.0 + NOISE_FACTOR * sin_stuff)
    return np.floor(bar_width * bar_height).astype(np.int64)


def get_program_output(base_value: int, start_time: datetime, current_time: datetime, cycle_time: Duration) -> int:
    """Units extracted by the cycle running at `current_time` for a program started at `start_time`."""
    cycle_ticks = _to_ticks(cycle_time)
    if cycle_ticks <= 0:
        raise ValueError(f"cycle_time must be positive, got {cycle_time!r}")

    time_diff = _to_ticks(current_time - start_time)
    cycle_number = max((time_diff + TICKS_PER_SECOND) // cycle_ticks - 1, 0)
    return int(_output_for_cycles(base_value, cycle_ticks, np.array([cycle_number], dtype=np.float64))[0])


def get_program_output_prediction(base_value: int, cycle_time: Duration, length: int) -> np.ndarray:
    """Per-cycle output for the first `length` cycles of a program."""
    cycle_ticks = _to_ticks(cycle_time)
    if cycle_ticks <= 0:
        raise ValueError(f"cycle_time must be positive, got {cycle_time!r}")
    if length <= 0:
        return np.zeros(0, dtype=np.int64)

    current_ticks = np.arange(1, length + 1, dtype=np.int64) * cycle_ticks
    cycle_numbers = np.maximum((current_ticks + TICKS_PER_SECOND) // cycle_ticks - 1, 0)
    logger.debug(f"Predicting {length} cycles for base value {base_value}.")
    return _output_for_cycles(base_value, cycle_ticks, cycle_numbers.astype(np.float64))
