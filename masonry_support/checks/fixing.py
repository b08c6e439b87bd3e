# masonry_support/checks/fixing.py
"""
FIXING CHECKS: CAST-IN CHANNEL OR STEEL-FRAME BOLTS
====================================================

PURPOSE:
--------
The bracket transfers a shear V_ed and a moment M_ed = V_ed·L into the
structure at its fixing. The moment is resisted by a couple: tension in the
fixing bolt and compression in a triangular stress block at the bracket heel.

CONCRETE (CAST-IN CHANNEL):
---------------------------
Taking moments about the bolt with a triangular block of length c:

    T = ½·f·w·c                                 (vertical equilibrium)
    T·(x - c) + f·w·c²/3 = M                    (moment equilibrium)

Substituting c = 2T/(f·w) gives a quadratic in T:

    (2/3)/(f·w)·T² - x·T + M = 0

The smaller root is the physical one. A negative discriminant means the
moment cannot be carried with this rise-to-bolts; that is reported as a
zeroed, failing result rather than an exception. The tension and shear
are then checked against the channel's tabulated capacities.

STEEL FRAME:
------------
Brackets bolted to a steel member use blind bolts (hollow sections) or set
screws (I-beams). Capacities come from a table; the interaction is linear
with the same 1.4 reduction on tension as the angle bolt:

    V/F_v + T/(1.4·F_t) ≤ 1.0

and the bolt must keep 1.2 × hole diameter to the member edge.
"""

import math
from typing import Dict, Any, Optional, List

from ..channels import ChannelSpecStore, missing_channel_note
from ..inputs import BLIND_BOLT, SET_SCREW, STEEL_BOLT_SIZES
from ..materials import MaterialProperties, DEFAULT_MATERIAL, SYSTEM_DEFAULTS
from ..precision import round12

EQUILIBRIUM_TOLERANCE = 1e-5

# Steel-frame fixing capacities (kN), keyed by (method, bolt size)
STEEL_FIXING_CAPACITIES: Dict[tuple, Dict[str, float]] = {
    (BLIND_BOLT, "M10"): {'tension': 12.7, 'shear': 19.5},
    (BLIND_BOLT, "M12"): {'tension': 22.0, 'shear': 28.3},
    (BLIND_BOLT, "M16"): {'tension': 42.9, 'shear': 52.8},
    (SET_SCREW, "M10"): {'tension': 20.9, 'shear': 18.0},
    (SET_SCREW, "M12"): {'tension': 30.3, 'shear': 26.2},
    (SET_SCREW, "M16"): {'tension': 56.5, 'shear': 48.7},
}

# Clearance hole diameters (mm); minimum edge distance is 1.2 × hole
HOLE_DIAMETERS = {"M10": 11.0, "M12": 13.0, "M16": 18.0}
EDGE_DISTANCE_FACTOR = 1.2


def calculate_tensile_load(M_ed: float, w: float, x: float, f_cd: float) -> Dict[str, Any]:
    """
    Bolt tension from the stress-block quadratic (SI units inside).

    Args:
        M_ed: Moment at the fixing (kNm)
        w: Base plate width (mm)
        x: Rise to bolts (mm)
        f_cd: Concrete grade (N/mm²)

    Returns:
        Dict with tensileLoad (kN), compressionZoneLength (mm) and the
        momentEquilibriumPasses, shearEquilibriumPasses, depthCheckPasses flags
    """
    moment = M_ed * 1000.0      # Nm
    width = w / 1000.0          # m
    rise = x / 1000.0           # m
    grade = f_cd * 1e6          # N/m²

    qa = (2.0 / 3.0) * (1.0 / (grade * width))
    qb = -rise
    qc = moment

    discriminant = qb * qb - 4.0 * qa * qc
    if discriminant < 0:
        return {
            'tensileLoad': 0.0,
            'compressionZoneLength': 0.0,
            'momentEquilibriumPasses': False,
            'shearEquilibriumPasses': False,
            'depthCheckPasses': False,
        }

    tension = (-qb - math.sqrt(discriminant)) / (2.0 * qa)
    compression = 2.0 * tension / (grade * width)

    moment_residual = (tension * (rise - compression)
                       + grade * width * (1.0 / 3.0) * compression * compression
                       - moment)
    shear_residual = tension - compression * grade * width * 0.5

    return {
        'tensileLoad': round12(tension / 1000.0),
        'compressionZoneLength': round12(compression * 1000.0),
        'momentEquilibriumPasses': abs(moment_residual) < EQUILIBRIUM_TOLERANCE,
        'shearEquilibriumPasses': abs(shear_residual) < EQUILIBRIUM_TOLERANCE,
        'depthCheckPasses': compression <= rise,
    }


def verify_fixing(
    applied_shear: float,
    design_cavity: float,
    facade_thickness: float,
    rise_to_bolts: float,
    channel_type: Optional[str],
    slab_thickness: float,
    bracket_centres: float,
    store: ChannelSpecStore,
    base_plate_width: float = SYSTEM_DEFAULTS.base_plate_width,
    concrete_grade: float = DEFAULT_MATERIAL.concrete_grade,
    load_position: float = 1.0 / 3.0,
) -> Dict[str, Any]:
    """
    Cast-in channel fixing check.

        L    = C' + facade·load_position
        M_ed = V_ed·L/1000

    The channel interaction here accepts either code formula:
    min(N^1.5 + V^1.5, (N + V)/1.2) ≤ 1. The separate combined stage
    (verify_combined_tension_shear) requires both.

    A channel row that cannot be resolved fails every channel flag and adds
    a `channel_note` naming the missing key.
    """
    L = design_cavity + facade_thickness * load_position
    V_ed = applied_shear
    M_ed = V_ed * L / 1000.0

    tensile = calculate_tensile_load(M_ed, base_plate_width, rise_to_bolts, concrete_grade)
    N_ed = tensile['tensileLoad']

    spec = store.lookup(channel_type, slab_thickness, bracket_centres) if channel_type else None

    result = {
        'appliedShear': round12(V_ed),
        'appliedMoment': round12(M_ed),
        'tensileForce': round12(N_ed),
        'tensileLoadResults': tensile,
        'channelShearCapacity': None,
        'channelTensionCapacity': None,
        'channelShearCheckPasses': False,
        'channelTensionCheckPasses': False,
        'channelCombinedUtilization': None,
        'channelCombinedCheckPasses': False,
        'channelSpecId': None,
        'channel_note': None,
    }

    if spec is None:
        result['channel_note'] = missing_channel_note(channel_type, slab_thickness, bracket_centres)
    else:
        tension_ratio = N_ed / spec.tension
        shear_ratio = V_ed / spec.shear
        formula_1 = tension_ratio ** 1.5 + shear_ratio ** 1.5
        formula_2 = (tension_ratio + shear_ratio) / 1.2
        combined = min(formula_1, formula_2)
        result.update({
            'channelShearCapacity': round12(spec.shear),
            'channelTensionCapacity': round12(spec.tension),
            'channelShearCheckPasses': V_ed <= spec.shear,
            'channelTensionCheckPasses': N_ed <= spec.tension,
            'channelCombinedUtilization': round12(combined),
            'channelCombinedCheckPasses': combined <= 1.0,
            'channelSpecId': spec.id,
        })

    concrete_ok = (tensile['momentEquilibriumPasses']
                   and tensile['shearEquilibriumPasses']
                   and tensile['depthCheckPasses'])
    result['passes'] = bool(concrete_ok
                            and result['channelShearCheckPasses']
                            and result['channelTensionCheckPasses']
                            and result['channelCombinedCheckPasses'])
    return result


def verify_combined_tension_shear(N_ed: float, V_ed: float, N_rd: float, V_rd: float) -> Dict[str, Any]:
    """
    Channel tension/shear interaction: both formulas must hold.

        (N/N_rd)^1.5 + (V/V_rd)^1.5 ≤ 1
        (N/N_rd + V/V_rd)/1.2        ≤ 1

    A zero capacity (no channel data) fails the check with infinite ratios.
    """
    N_ratio = N_ed / N_rd if N_rd > 0 else math.inf
    V_ratio = V_ed / V_rd if V_rd > 0 else math.inf
    U_1 = round12(N_ratio ** 1.5 + V_ratio ** 1.5)
    U_2 = round12((N_ratio + V_ratio) / 1.2)

    return {
        'N_ed': round12(N_ed),
        'V_ed': round12(V_ed),
        'N_rd': round12(N_rd),
        'V_rd': round12(V_rd),
        'N_ratio': round12(N_ratio),
        'V_ratio': round12(V_ratio),
        'U_combined_1': U_1,
        'U_combined_2': U_2,
        'passes': U_1 <= 1.0 and U_2 <= 1.0,
    }


# ============================================================================
# STEEL-FRAME FIXING
# ============================================================================

def steel_fixing_capacity(method: str, bolt_size: str) -> Dict[str, float]:
    try:
        return STEEL_FIXING_CAPACITIES[(method, bolt_size)]
    except KeyError:
        raise ValueError(f"No steel fixing capacity for {method} {bolt_size}") from None


def steel_fixing_methods(section_type: str, requested: str) -> List[str]:
    """Fixing methods allowed for a section: hollow sections need blind bolts."""
    if section_type in ("RHS", "SHS"):
        return [BLIND_BOLT]
    if requested == "both":
        return [SET_SCREW, BLIND_BOLT]
    return [requested]


def steel_bolt_sizes(requested: str) -> List[str]:
    return list(STEEL_BOLT_SIZES) if requested == "all" else [requested]


def verify_steel_fixing(applied_shear: float, applied_tension: float, method: str,
                        bolt_size: str, material: MaterialProperties = DEFAULT_MATERIAL) -> Dict[str, Any]:
    """Linear shear/tension interaction for a bolt into a steel member."""
    capacity = steel_fixing_capacity(method, bolt_size)
    shear_util = applied_shear / capacity['shear']
    tension_util = applied_tension / capacity['tension']
    adjusted = applied_tension / (material.factors.tension_reduction * capacity['tension'])
    combined = shear_util + adjusted

    return {
        'fixingMethod': method,
        'boltSize': bolt_size,
        'appliedShear': round12(applied_shear),
        'appliedTension': round12(applied_tension),
        'shearCapacity': capacity['shear'],
        'tensionCapacity': capacity['tension'],
        'shearUtilization': round12(shear_util),
        'tensionUtilization': round12(tension_util),
        'adjustedTensionUtilization': round12(adjusted),
        'combinedUtilization': round12(combined),
        'passes': combined <= 1.0,
    }


def required_edge_distance(bolt_size: str) -> float:
    return round12(HOLE_DIAMETERS[bolt_size] * EDGE_DISTANCE_FACTOR)


def verify_edge_distance(rise_to_bolts: float, bolt_size: str, is_inverted: bool = False) -> Dict[str, Any]:
    """
    Bolt to member edge distance. Utilization here is provided/required, so
    values below 1.0 fail.
    """
    if bolt_size not in HOLE_DIAMETERS:
        raise ValueError(f"Unknown steel bolt size {bolt_size!r}")
    required = required_edge_distance(bolt_size)
    return {
        'riseToBolts': round12(rise_to_bolts),
        'requiredEdgeDistance': required,
        'boltSize': bolt_size,
        'passes': rise_to_bolts >= required,
        'utilization': round12(rise_to_bolts / required),
        'isInverted': is_inverted,
    }


def verify_steel_frame_fixing(
    applied_shear: float,
    design_cavity: float,
    facade_thickness: float,
    rise_to_bolts: float,
    method: str,
    bolt_size: str,
    is_inverted: bool = False,
    load_position: float = 1.0 / 3.0,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> Dict[str, Any]:
    """
    Fixing check in steel-frame mode.

    The fixing moment is taken by the bolt over the rise-to-bolts lever arm
    (the member flange bears at the heel). The result has the same top-level
    keys as verify_fixing so the combined stage can consume either; the
    steel capacities stand in for the channel capacities.
    """
    L = design_cavity + facade_thickness * load_position
    M_ed = applied_shear * L / 1000.0
    tension = M_ed / (rise_to_bolts / 1000.0) if rise_to_bolts > 0 else math.inf

    steel = verify_steel_fixing(applied_shear, tension, method, bolt_size, material)
    edge = verify_edge_distance(rise_to_bolts, bolt_size, is_inverted)

    return {
        'appliedShear': round12(applied_shear),
        'appliedMoment': round12(M_ed),
        'tensileForce': round12(tension),
        'tensileLoadResults': None,
        'channelShearCapacity': steel['shearCapacity'],
        'channelTensionCapacity': steel['tensionCapacity'],
        'channelShearCheckPasses': applied_shear <= steel['shearCapacity'],
        'channelTensionCheckPasses': tension <= steel['tensionCapacity'],
        'channelCombinedUtilization': steel['combinedUtilization'],
        'channelCombinedCheckPasses': steel['passes'],
        'channelSpecId': None,
        'channel_note': None,
        'steelFixingResults': steel,
        'edgeDistanceResults': edge,
        'passes': bool(steel['passes'] and edge['passes']),
    }
