# masonry_support/materials.py
"""
MATERIALS: STEEL PROPERTIES, SAFETY FACTORS AND SYSTEM DEFAULTS
================================================================

PURPOSE:
--------
One place for every engineering constant the verification pipeline needs.
Instead of writing 210, 1.1 or 200000 inside each check, the checks receive a
MaterialProperties value (and its SafetyFactors) as an argument.

WHY THIS MATTERS:
-----------------
1. **Traceability**: a reviewer can see every constant used in a calculation
   by printing one object.

2. **Explicit data flow**: the verification stages are pure functions of their
   arguments. Swapping a material (e.g. a higher grade) means passing a
   different value, not editing module globals.

3. **Parallel evaluation**: frozen dataclasses are hashable, picklable and
   safe to share between worker processes.

ENGINEERING CONTEXT:
--------------------
Brackets and angles are stainless steel with a design yield of 210 N/mm²
(0.2% proof strength), E = 200 kN/mm² and a Ramberg-Osgood exponent n = 8 for
the non-linear stress-strain curve used in the deflection check. Bolts are
A4-70 (f_ub = 700 N/mm²). Partial factors follow EN 1993-1-4 / EN 1993-1-8:
γ_M0 = 1.1 for member resistance, γ_M2 = 1.25 for bolts.
"""

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class SafetyFactors:
    """
    Partial factors.

    Parameters:
    -----------
    gamma_m0 : float
        Member resistance factor (bending, shear)
    gamma_m2 : float
        Bolt resistance factor
    load_factor : float
        ULS factor on the characteristic UDL (also used to step back to SLS)
    tension_reduction : float
        Divisor on tension resistance in the combined bolt interaction
    """
    gamma_m0: float = 1.1
    gamma_m2: float = 1.25
    load_factor: float = 1.35
    tension_reduction: float = 1.4


@dataclass(frozen=True)
class MaterialProperties:
    """
    Steel and concrete properties used by the checks.

    Units are N and mm throughout (stresses in N/mm²).
    """
    fy: float = 210.0             # Design yield (0.2% proof) strength
    E: float = 200000.0           # Young's modulus
    ramberg_osgood_n: float = 8.0  # Non-linearity exponent
    bolt_fub: float = 700.0       # Bolt ultimate tensile strength
    steel_density: float = 7850.0  # kg/m³
    concrete_grade: float = 30.0  # f_ck, used as the stress-block strength
    epsilon: float = 1.058        # Web slenderness factor for class limits
    factors: SafetyFactors = field(default_factory=SafetyFactors)


@dataclass(frozen=True)
class SystemDefaults:
    """Fixed system geometry and limits (mm unless noted)."""
    bracket_top_to_fixing: float = 40.0     # Y: bracket top to fixing centre
    base_plate_width: float = 56.0
    plates_per_channel: int = 2
    slot_adjustment: float = 15.0           # worst-case slot position
    packer_thickness: float = 10.0
    isolation_shim: float = 3.0
    include_span_deflection: bool = True
    angle_deflection_limit: float = 1.5
    system_deflection_limit: float = 2.0
    gravity: float = 9.81
    min_fixing_position: float = 75.0
    max_angle_height: float = 400.0
    min_standard_bracket_height: float = 150.0
    min_inverted_rise: float = 120.0
    dim_d_min: float = 130.0
    dim_d_max: float = 450.0


DEFAULT_MATERIAL = MaterialProperties()
SYSTEM_DEFAULTS = SystemDefaults()


# Tensile stress areas (mm²) for the angle-to-bracket bolts
BOLT_STRESS_AREAS: Dict[int, float] = {
    10: 58.0,
    12: 84.3,
}


# Second moment of area (mm⁴) of the angle over the span between brackets,
# keyed by angle thickness. Unknown thickness -> 0 (span cannot be assessed).
IXX_3_BY_ANGLE_THICKNESS: Dict[int, float] = {
    3: 139727.0,
    4: 180849.0,
    5: 218359.0,
    6: 255683.0,
    8: 617257.0,
    10: 741102.0,
}


def bolt_stress_area(bolt_diameter: int) -> float:
    """
    Tensile stress area for an angle-to-bracket bolt.

    Args:
        bolt_diameter: Nominal diameter in mm (10 or 12)

    Returns:
        As in mm²

    Raises:
        ValueError: if the diameter is not tabulated
    """
    try:
        return BOLT_STRESS_AREAS[int(bolt_diameter)]
    except KeyError:
        raise ValueError(f"No stress area for M{bolt_diameter} bolts") from None


def ixx_3(angle_thickness: float) -> float:
    return IXX_3_BY_ANGLE_THICKNESS.get(int(angle_thickness), 0.0)
