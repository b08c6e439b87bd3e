# masonry_support/checks/bracket.py
"""Bracket plate bending at the fixing (EN 1993-1-4 section classification)."""

from typing import Dict, Any

from ..materials import MaterialProperties, DEFAULT_MATERIAL, SYSTEM_DEFAULTS
from ..precision import round12

CLASS_1_LIMIT = 56.0


def verify_bracket_design(
    V_ed: float,
    C: float,
    Ecc: float,
    L: float,
    H_notch: float,
    t: float,
    n_p: int = SYSTEM_DEFAULTS.plates_per_channel,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> Dict[str, Any]:
    """
    Bending capacity of the bracket's two side plates.

        d_c   = L - H_notch                 (effective depth)
        M_ed  = V_ed·(C + Ecc)/1000
        W     = 1.2·t·d_c²/6·n_p
        M_rd  = F_y·W/(γ_M0·1e6)

    Class 1 (56ε > d_c/t) is reported for information; the pass condition
    is M_rd ≥ M_ed.

    Args:
        V_ed: Design shear (kN)
        C: Cavity width (mm)
        Ecc: Load eccentricity (mm)
        L: Bracket height (mm)
        H_notch: Notch height (mm)
        t: Bracket thickness (mm)
        n_p: Plates per bracket
        material: Steel properties

    Returns:
        Dict with t, n_p, H_notch, d_c, d_ct, epsilon, epsilon_56,
        is_class_1, M_ed_bracket, W_pl_c, M_rd_bracket, passes
    """
    d_c = L - H_notch
    d_ct = d_c / t
    epsilon_56 = CLASS_1_LIMIT * material.epsilon
    M_ed = V_ed * (C + Ecc) / 1000.0
    W_pl = 1.2 * t * d_c ** 2 / 6.0 * n_p
    M_rd = (material.fy * W_pl) / (material.factors.gamma_m0 * 1e6)

    return {
        't': t,
        'n_p': n_p,
        'H_notch': H_notch,
        'd_c': round12(d_c),
        'd_ct': round12(d_ct),
        'epsilon': material.epsilon,
        'epsilon_56': round12(epsilon_56),
        'is_class_1': epsilon_56 > d_ct,
        'M_ed_bracket': round12(M_ed),
        'W_pl_c': round12(W_pl),
        'M_rd_bracket': round12(M_rd),
        'passes': M_rd >= M_ed,
    }
