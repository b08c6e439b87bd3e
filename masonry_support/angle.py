# masonry_support/angle.py
"""
ANGLE AND BRACKET CROSS-SECTION PARAMETERS
===========================================

PURPOSE:
--------
Turn the candidate's thicknesses and the cavity into the section properties
the checks use: the angle's bearing length, section modulus, shear area and
second moment of area, plus the bracket's design cavity and projection.

GEOMETRY (mm):
--------------
    C   cavity width
    D   bracket projection into the cavity
    S   isolation shim thickness
    T   angle thickness
    B   horizontal leg of the angle (from the facade projection)
    d   cavity face to back of the angle = (C - D - S) + (6 if T == 5 else 5)
    b   bearing length = B - T - d

All angle properties are per bracket centres length B_cc:
    Z     = B_cc·T²/6
    Av    = B_cc·T
    Ixx_1 = B_cc·T³/12
"""

import logging
from typing import Dict, Optional

from .precision import round12, ceil_to, floor_to

logger = logging.getLogger(__name__)

MIN_PROJECTION = 40.0
MAX_PROJECTION = 200.0
DEFAULT_HORIZONTAL_LEG = 90.0
PROJECTION_STEP = 5.0
FACADE_MULTIPLIER = 2.0 / 3.0


def calculate_bracket_parameters(cavity: float) -> Dict[str, float]:
    """
    Bracket-level dimensions derived from the cavity.

    Returns:
        design_cavity: C' = C + 20 (lever arm allowance at the fixing)
        bracket_projection: (C - 10) rounded down to 5 mm
    """
    return {
        'design_cavity': round12(cavity + 20.0),
        'bracket_projection': round12(floor_to(cavity - 10.0, PROJECTION_STEP)),
    }


def calculate_angle_projection(
    facade_thickness: float,
    cavity: float,
    bracket_projection: float,
    isolation_shim_thickness: float = 3.0,
    front_offset: float = 12.0,
) -> Dict[str, float]:
    """
    Horizontal leg needed to reach two thirds into the facade.

        raw = 2/3·facade + cavity - (bracket_projection + shim) + front_offset

    rounded up to 5 mm and clamped to [40, 200].

    Raises:
        ValueError: non-positive facade/cavity or negative projection/shim
    """
    if facade_thickness is None or facade_thickness <= 0:
        raise ValueError(f"Facade thickness must be greater than 0 (received: {facade_thickness})")
    if cavity <= 0:
        raise ValueError(f"Cavity width must be greater than 0 (received: {cavity})")
    if bracket_projection < 0:
        raise ValueError(f"Bracket projection must be non-negative (received: {bracket_projection})")
    if isolation_shim_thickness < 0:
        raise ValueError(f"Isolation shim thickness must be non-negative (received: {isolation_shim_thickness})")

    raw = round12(
        FACADE_MULTIPLIER * facade_thickness
        + cavity
        - (bracket_projection + isolation_shim_thickness)
        + front_offset
    )
    rounded = ceil_to(raw, PROJECTION_STEP)
    constrained = max(MIN_PROJECTION, min(rounded, MAX_PROJECTION))

    return {
        'raw_projection': raw,
        'rounded_projection': round12(constrained),
        'was_rounded': abs(rounded - raw) > 0.001,
        'was_clamped': constrained != rounded,
    }


def calculate_angle_parameters(
    C: float,
    D: float,
    S: float,
    T: float,
    B_cc: float,
    facade_thickness: Optional[float] = None,
    isolation_shim_thickness: Optional[float] = None,
    front_offset: float = 12.0,
    B: Optional[float] = None,
) -> Dict[str, float]:
    """
    Angle section properties for one candidate.

    The horizontal leg comes from calculate_angle_projection() when a facade
    thickness is known; otherwise the explicit B (or 90 mm) is used.

    Args:
        C: Cavity width (mm)
        D: Bracket projection (mm)
        S: Isolation shim thickness (mm)
        T: Angle thickness (mm)
        B_cc: Bracket centres (mm)
        facade_thickness: Facade leaf thickness for the projection (mm)
        isolation_shim_thickness: Shim for the projection (defaults to S)
        front_offset: Projection offset past the load line (mm)
        B: Explicit horizontal leg, used when no facade is given

    Returns:
        Dict with d, b, R, Z, Av, Ixx_1, horizontal_leg
    """
    horizontal_leg = B or DEFAULT_HORIZONTAL_LEG
    if facade_thickness:
        shim = isolation_shim_thickness if isolation_shim_thickness is not None else S
        try:
            projection = calculate_angle_projection(facade_thickness, C, D, shim, front_offset)
            horizontal_leg = projection['rounded_projection']
        except ValueError as exc:
            logger.debug("Angle projection unavailable (%s), using %s mm leg", exc, DEFAULT_HORIZONTAL_LEG)
            horizontal_leg = DEFAULT_HORIZONTAL_LEG

    d = (C - D - S) + (6.0 if T == 5 else 5.0)
    b = horizontal_leg - T - d

    return {
        'd': round12(d),
        'b': round12(b),
        'R': round12(T),
        'Z': round12(B_cc * T ** 2 / 6.0),
        'Av': round12(B_cc * T),
        'Ixx_1': round12(B_cc * T ** 3 / 12.0),
        'horizontal_leg': round12(horizontal_leg),
    }


def effective_vertical_leg(original_vertical_leg: float, extension=None) -> float:
    """Vertical leg after angle extension (the extended height when one was applied)."""
    if extension is None or not extension.extension_applied:
        return round12(original_vertical_leg)
    return round12(extension.extended_angle_height)
