# masonry_support/checks/model.py
"""Mathematical model of the loaded angle: eccentricity and lever lengths."""

import math
from typing import Dict, Optional

from ..precision import round12


def calculate_mathematical_model(
    d: float,
    T: float,
    R: float,
    L_bearing: float,
    A: float,
    M: Optional[float] = None,
    facade_thickness: Optional[float] = None,
    load_position: Optional[float] = None,
) -> Dict[str, float]:
    """
    Eccentricity of the masonry load and the angle's lever lengths.

        Ecc = facade_thickness × load_position
        a   = d + Ecc - (T + R) + π(T/2 + R)     (load to heel, around the bend)
        b   = L_bearing - Ecc                    (load to toe)
        I   = A - (R + T) - 16.5                 (heel to bolt on the vertical leg)

    When no facade thickness is given the masonry thickness M is used with
    the one-third load position, so calc(M=x) == calc(facade=x, position=1/3).

    Args:
        d: Cavity face to back of angle (mm)
        T: Angle thickness (mm)
        R: Internal bend radius (mm)
        L_bearing: Bearing length b from the angle parameters (mm)
        A: Vertical leg (effective, after any extension) (mm)
        M: Masonry thickness (mm)
        facade_thickness: Facade thickness (mm)
        load_position: Load position as a fraction of the facade (0-1)

    Returns:
        Dict with Ecc, a, b, I
    """
    thickness = facade_thickness if facade_thickness is not None else M
    if thickness is None:
        raise ValueError("Either facade_thickness or masonry thickness M is required")
    position = load_position if load_position is not None else 1.0 / 3.0

    Ecc = round12(thickness * position)
    a = d + Ecc - (T + R) + math.pi * (T / 2.0 + R)
    b = L_bearing - Ecc
    I = A - (R + T) - 16.5

    return {
        'Ecc': Ecc,
        'a': round12(a),
        'b': round12(b),
        'I': round12(I),
    }
