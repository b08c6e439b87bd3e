# masonry_support/checks/angle.py
"""
Angle checks: bending and shear at ULS, deflection at SLS (EN 1993-1-4).

The angle spans bracket to bracket and cantilevers from the bracket heel to
carry the masonry on its horizontal leg. Section properties are per bracket
centres length (see angle.calculate_angle_parameters).
"""

import math
from typing import Dict, Any

from ..materials import MaterialProperties, DEFAULT_MATERIAL, SYSTEM_DEFAULTS
from ..precision import round12


def verify_moment_resistance(
    V_ed: float,
    Ecc: float,
    d: float,
    T: float,
    Z: float,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> Dict[str, Any]:
    """
    Bending resistance of the angle at the heel.

        L_1   = Ecc + d + T
        M_ed  = V_ed·L_1/1000                   (kNm)
        Mc_rd = (Z/1e6)·(F_y/γ_M0)              (kNm)

    Args:
        V_ed: Design shear per bracket (kN)
        Ecc: Load eccentricity (mm)
        d: Cavity face to back of angle (mm)
        T: Angle thickness (mm)
        Z: Section modulus (mm³)
        material: Steel properties and partial factors

    Returns:
        Dict with L_1, M_ed_angle, Mc_rd_angle, utilization (%), passes
    """
    L_1 = Ecc + d + T
    M_ed = V_ed * (L_1 / 1000.0)
    Mc_rd = (Z / 1e6) * (material.fy / material.factors.gamma_m0)
    utilization = (M_ed / Mc_rd) * 100.0

    return {
        'L_1': round12(L_1),
        'M_ed_angle': round12(M_ed),
        'Mc_rd_angle': round12(Mc_rd),
        'utilization': round12(utilization),
        'passes': utilization <= 100.0,
    }


def verify_shear_resistance(
    V_ed: float,
    A_v: float,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> Dict[str, Any]:
    """
    Shear resistance of the angle.

        VR_d = A_v·(F_y/√3)/γ_M0/1000           (kN)

    Returns:
        Dict with V_ed, VR_d_angle, utilization (%), passes, and the
        appliedShear/shearResistance aliases used in reports
    """
    VR_d = A_v * (material.fy / math.sqrt(3.0)) / material.factors.gamma_m0 / 1000.0
    utilization = (V_ed / VR_d) * 100.0

    return {
        'V_ed': round12(V_ed),
        'VR_d_angle': round12(VR_d),
        'utilization': round12(utilization),
        'passes': utilization <= 100.0,
        'appliedShear': round12(V_ed),
        'shearResistance': round12(VR_d),
    }


def secant_modulus(stress: float, material: MaterialProperties = DEFAULT_MATERIAL) -> float:
    """
    Ramberg-Osgood secant modulus at a service stress.

        Es = E / (1 + 0.002·(E/σ)·(σ/F_y)^n)

    Zero stress returns E (linear-elastic limit).
    """
    if stress <= 0:
        return material.E
    E = material.E
    return E / (1.0 + 0.002 * (E / stress) * (stress / material.fy) ** material.ramberg_osgood_n)


def verify_angle_deflection(
    V_ed: float,
    L_1: float,
    M_ed_angle: float,
    Z: float,
    a: float,
    b: float,
    I: float,
    B: float,
    Ixx_1: float,
    material: MaterialProperties = DEFAULT_MATERIAL,
    limit: float = SYSTEM_DEFAULTS.angle_deflection_limit,
) -> Dict[str, Any]:
    """
    Vertical deflection of the angle toe at SLS.

    Two parts add up:
    1. Tip deflection of the horizontal leg as a cantilever from the heel.
    2. Heel deflection: the vertical leg bends about the bolt, rotating the
       horizontal leg by atan(D_horz/I); the toe drops B·sin(rotation).

    Stainless steel is non-linear, so the modulus is the Ramberg-Osgood
    secant modulus at the service stress (rounded before use, as the span
    check reuses it).

    Args:
        V_ed: Design shear (kN), stepped back to SLS with the load factor
        L_1: Lever arm from the moment check (mm)
        M_ed_angle: Design moment from the moment check (kNm)
        Z: Section modulus (mm³)
        a, b, I: Lever lengths from the mathematical model (mm)
        B: Horizontal leg (mm)
        Ixx_1: Angle second moment of area (mm⁴)
        material: Steel properties
        limit: Deflection limit (mm)

    Returns:
        Dict with V_ek, M_ek, SLS_ds, Es_1, Es_sr, D_tip, D_horz,
        rotation_heel, D_heel, totalDeflection, utilization (%), passes
    """
    L_f = material.factors.load_factor

    V_ek = V_ed / L_f
    M_ek = V_ek * L_1 / 1000.0
    SLS_ds = M_ed_angle * 1e6 / Z / L_f
    Es_1 = round12(secant_modulus(SLS_ds, material))

    D_tip = (V_ek * 1000.0 * a ** 2 * (3.0 * (a + b) - a)) / (6.0 * Es_1 * Ixx_1)
    D_horz = (M_ek * 1e6 * I ** 2) / (2.0 * Es_1 * Ixx_1)
    rotation = math.atan(D_horz / I)
    D_heel = B * math.sin(rotation)
    total = D_tip + D_heel

    return {
        'V_ek': round12(V_ek),
        'M_ek': round12(M_ek),
        'SLS_ds': round12(SLS_ds),
        'Es_1': Es_1,
        'Es_sr': Es_1,
        'D_tip': round12(D_tip),
        'D_horz': round12(D_horz),
        'rotation_heel': round12(rotation),
        'D_heel': round12(D_heel),
        'totalDeflection': round12(total),
        'utilization': round12(total / limit * 100.0),
        'passes': total <= limit,
    }
