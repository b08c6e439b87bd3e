# masonry_support/checks/deflection.py
"""System deflection: bracket drop below the slab and the angle span between brackets."""

import math
from typing import Dict, Any

from ..materials import MaterialProperties, DEFAULT_MATERIAL, SYSTEM_DEFAULTS, ixx_3
from ..precision import round12


def verify_dropping_below_slab(
    P: float,
    H_notch: float,
    V_ek: float,
    C_prime: float,
    Ecc: float,
    B_proj_fix: float,
    t: float,
    L_bearing: float,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> Dict[str, Any]:
    """
    Extra heel deflection when the bracket hangs below the slab soffit.

    The part of the bracket below the soffit (or the notch, if deeper) bends
    as a cantilever; its end rotation tips the whole support by
    (C' + L_bearing)·sin(θ). This stage never fails on its own: it feeds
    D_heel_2 into the total deflection check.

    Args:
        P: Drop below slab (mm); ≤ 0 means no drop
        H_notch: Notch height (mm)
        V_ek: Characteristic shear (kN)
        C_prime: Design cavity (mm)
        Ecc: Load eccentricity (mm)
        B_proj_fix: Bracket projection at the fixing (mm)
        t: Bracket thickness (mm)
        L_bearing: Angle bearing length (mm)
    """
    L_d = C_prime + Ecc
    M_ek_drop = V_ek * L_d / 1000.0
    Ixx_2 = 2.0 * (t * B_proj_fix ** 3) / 12.0

    if P <= 0:
        return {
            'P': P,
            'H_notch': H_notch,
            'P_eff': 0.0,
            'V_ek': round12(V_ek),
            'L_d': round12(L_d),
            'M_ek_drop': round12(M_ek_drop),
            'B_proj_fix': round12(B_proj_fix),
            'Ixx_2': round12(Ixx_2),
            'L_deflection': 0.0,
            'rotation_heel_2': 0.0,
            'D_heel_2': 0.0,
            'passes': True,
        }

    P_eff = H_notch if H_notch > P else P
    L_deflection = (M_ek_drop * 1e6 * P_eff ** 2) / (2.0 * material.E * Ixx_2)
    rotation = math.atan(L_deflection / P_eff)
    D_heel_2 = (C_prime + L_bearing) * math.sin(rotation)

    return {
        'P': round12(P),
        'H_notch': round12(H_notch),
        'P_eff': round12(P_eff),
        'V_ek': round12(V_ek),
        'L_d': round12(L_d),
        'M_ek_drop': round12(M_ek_drop),
        'B_proj_fix': round12(B_proj_fix),
        'Ixx_2': round12(Ixx_2),
        'L_deflection': round12(L_deflection),
        'rotation_heel_2': round12(rotation),
        'D_heel_2': round12(D_heel_2),
        'passes': True,
    }


def verify_total_deflection(
    D_total: float,
    D_heel_2: float,
    Es_sr: float,
    B_cc: float,
    C_udl: float,
    T: float,
    include_span: bool = SYSTEM_DEFAULTS.include_span_deflection,
    limit: float = SYSTEM_DEFAULTS.system_deflection_limit,
) -> Dict[str, Any]:
    """
    Total vertical deflection at the angle toe.

        TVD  = D_total (angle) + D_heel_2 (drop)
        span = 5·C_udl·1000·B_cc³/(384·Es_sr·Ixx_3)

    The span term is the angle sagging between brackets under the
    characteristic UDL. An angle thickness with no Ixx_3 entry cannot be
    assessed and fails.
    """
    tvd = D_total + D_heel_2
    I3 = ixx_3(T)

    if include_span and I3 <= 0:
        span = 0.0
        total = tvd
        passes = False
    else:
        span = (5.0 * C_udl * 1000.0 * B_cc ** 3) / (384.0 * Es_sr * I3) if I3 > 0 else 0.0
        total = tvd + span if include_span else tvd
        passes = total <= limit

    return {
        'Total_Vertical_Deflection': round12(tvd),
        'Ixx_3': round12(I3),
        'Addition_deflection_span': round12(span),
        'Total_deflection_of_system': round12(total),
        'utilization': round12(total / limit * 100.0),
        'passes': passes,
    }
