"""Amplification coefficient ramping.

A moves linearly from ``initial_a`` to ``target_a`` over the ramp window and
stays at ``target_a`` afterwards. Values are scaled by A_PRECISION; the
governance-facing ``target_a`` argument of ``start_ramp`` is unscaled.
"""

from __future__ import annotations

from basket_amm.constants import MAX_A, MAX_A_CHANGE_FACTOR, MIN_RAMP_TIME
from basket_amm.errors import InvalidConfiguration
from basket_amm.math.fixed_point import A_PRECISION
from basket_amm.models.state import AmpData


def current_a(amp: AmpData, now: int) -> int:
    """A at time ``now``, scaled by A_PRECISION."""
    if now >= amp.ramp_end_time:
        return amp.target_a

    elapsed = now - amp.ramp_start_time
    duration = amp.ramp_end_time - amp.ramp_start_time
    if amp.target_a > amp.initial_a:
        return amp.initial_a + (amp.target_a - amp.initial_a) * elapsed // duration
    return amp.initial_a - (amp.initial_a - amp.target_a) * elapsed // duration


def start_ramp(amp: AmpData, target_a: int, ramp_end_time: int, now: int) -> AmpData:
    """Begin ramping A towards ``target_a`` (unscaled), ending at ``ramp_end_time``.

    Raises:
        InvalidConfiguration: If the previous ramp started less than a day ago,
            the ramp is shorter than a day, the target is out of bounds, or A
            would change by more than a factor of 10
    """
    if now < amp.ramp_start_time + MIN_RAMP_TIME:
        raise InvalidConfiguration("Sufficient period of previous ramp has not elapsed")
    if ramp_end_time < now + MIN_RAMP_TIME:
        raise InvalidConfiguration("Ramp time too short")
    if target_a <= 0 or target_a >= MAX_A:
        raise InvalidConfiguration("A target out of bounds")

    a_now = current_a(amp, now)
    scaled_target = target_a * A_PRECISION
    if scaled_target > a_now:
        if scaled_target > a_now * MAX_A_CHANGE_FACTOR:
            raise InvalidConfiguration("A target increase too big")
    elif scaled_target * MAX_A_CHANGE_FACTOR < a_now:
        raise InvalidConfiguration("A target decrease too big")

    return AmpData(
        initial_a=a_now,
        target_a=scaled_target,
        ramp_start_time=now,
        ramp_end_time=ramp_end_time,
    )


def stop_ramp(amp: AmpData, now: int) -> AmpData:
    """Freeze A at its current value.

    Raises:
        InvalidConfiguration: If no ramp is in progress
    """
    if amp.ramp_end_time <= now:
        raise InvalidConfiguration("Amplification not changing")

    a_now = current_a(amp, now)
    return AmpData(initial_a=a_now, target_a=a_now, ramp_start_time=now, ramp_end_time=now)
