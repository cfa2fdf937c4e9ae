"""
steering.py – Stateless steering behaviours (Reynolds style).

Every function takes plain positions (anything ``pygame.math.Vector2``
accepts) and returns a fresh ``Vector2`` velocity in units/second.

    seek   – straight toward a target
    flee   – straight away from a threat
    orbit  – strafe around a target, correcting toward a desired ring
    stop   – zero vector
"""

from __future__ import annotations

from pygame.math import Vector2

from settings import (
    ORBIT_INNER_FRACTION, ORBIT_OUTER_FRACTION, ORBIT_CORRECTION_SPEED_MULT,
)


def heading(origin, target) -> Vector2:
    """Unit vector from *origin* to *target*.

    Coincident points fall back to +x (same as atan2(0, 0) == 0).
    """
    offset = Vector2(target) - Vector2(origin)
    if offset.length_squared() == 0:
        return Vector2(1, 0)
    return offset.normalize()


def seek(origin, target, speed: float) -> Vector2:
    return heading(origin, target) * speed


def flee(origin, threat, speed: float) -> Vector2:
    return heading(threat, origin) * speed


def orbit(origin, target, desired_distance: float, speed: float) -> Vector2:
    """Circle *target* at roughly *desired_distance*.

    Inside 0.8× the ring the strafe is rotated from the away bearing,
    outside 1.2× it is rotated from the toward bearing; both run at
    0.7× speed. On the ring it is a pure full-speed strafe.
    """
    bearing = heading(origin, target)
    dist = Vector2(origin).distance_to(Vector2(target))

    if dist < desired_distance * ORBIT_INNER_FRACTION:
        # (bearing + 180°) + 90°
        return bearing.rotate(-90) * (speed * ORBIT_CORRECTION_SPEED_MULT)
    if dist > desired_distance * ORBIT_OUTER_FRACTION:
        return bearing.rotate(90) * (speed * ORBIT_CORRECTION_SPEED_MULT)
    return bearing.rotate(90) * speed


def stop() -> Vector2:
    return Vector2(0, 0)
