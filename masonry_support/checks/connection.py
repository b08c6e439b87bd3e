# masonry_support/checks/connection.py
"""Angle-to-bracket bolt connection, with and without packers (EN 1993-1-8)."""

from typing import Dict, Any

from ..materials import MaterialProperties, DEFAULT_MATERIAL, bolt_stress_area
from ..precision import round12

# k2 factor on tension resistance (EN 1993-1-8 Table 3.4)
K2_TENSION = 0.9
# alpha_v for shear through the threads of A4-70 bolts
ALPHA_V = 0.5


def verify_angle_to_bracket_connection(
    V_ed: float,
    B: float,
    b: float,
    I: float,
    bolt_diameter: int,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> Dict[str, Any]:
    """
    Single bolt through the angle's vertical leg into the bracket.

    The load acts at the bearing point, so the bolt sees a moment about the
    heel which it resists in tension over the lever arm I:

        M_b   = V_ed·(B - b + 10)/1000          (kNm)
        N     = M_b/(I/1000)                    (kN)
        V_rd  = α_v·f_ub·As/γ_M2/1000
        N_rd  = k2·As·f_ub/γ_M2/1000
        U_c   = U_v + N/(1.4·N_rd)·100          passes iff ≤ 100 %

    Args:
        V_ed: Design shear (kN)
        B: Horizontal leg (mm)
        b: Load to toe distance from the mathematical model (mm)
        I: Heel to bolt distance from the mathematical model (mm)
        bolt_diameter: 10 or 12
        material: Bolt strength and partial factors

    Returns:
        Dict with M_b, N_bolt, V_bolt_resistance, U_v_bolt,
        N_bolt_resistance, U_n_bolt, U_c_bolt, passes
    """
    As = bolt_stress_area(bolt_diameter)
    factors = material.factors

    M_b = V_ed * (B - b + 10.0) / 1000.0
    N_bolt = M_b / (I / 1000.0)
    V_rd = ALPHA_V * material.bolt_fub * As / factors.gamma_m2 / 1000.0
    U_v = (V_ed / V_rd) * 100.0
    N_rd = K2_TENSION * As * material.bolt_fub / factors.gamma_m2 / 1000.0
    U_n = (N_bolt / N_rd) * 100.0
    U_c = U_v + (N_bolt / (factors.tension_reduction * N_rd)) * 100.0

    return {
        'M_b': round12(M_b),
        'N_bolt': round12(N_bolt),
        'V_bolt_resistance': round12(V_rd),
        'U_v_bolt': round12(U_v),
        'N_bolt_resistance': round12(N_rd),
        'U_n_bolt': round12(U_n),
        'U_c_bolt': round12(U_c),
        'passes': U_c <= 100.0,
    }


def verify_shear_reduction_due_to_packers(
    V_ed: float,
    N_bolt: float,
    V_bolt_resistance: float,
    N_bolt_resistance: float,
    t_p: float,
    d_p: float,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> Dict[str, Any]:
    """
    Packer reduction on bolt shear resistance (EN 1993-1-8 3.6.1(12)).

        β_p = min(9d/(8d + 3t_p), 1)

    Tension resistance is unaffected.
    """
    beta_p = min((9.0 * d_p) / (8.0 * d_p + 3.0 * t_p), 1.0)
    V_rd = beta_p * V_bolt_resistance
    combined = (V_ed / V_rd) * 100.0 + (N_bolt / (material.factors.tension_reduction * N_bolt_resistance)) * 100.0

    return {
        't_p': round12(t_p),
        'd_p': round12(d_p),
        'beta_p': round12(beta_p),
        'V_rd': round12(V_rd),
        'T_rd': round12(N_bolt_resistance),
        'combined_utilization': round12(combined),
        'passes': combined <= 100.0,
    }


def packer_pass_through(connection: Dict[str, Any], bolt_diameter: int) -> Dict[str, Any]:
    """Packer result when no packer is fitted: the connection check unchanged."""
    return {
        't_p': 0.0,
        'd_p': round12(bolt_diameter),
        'beta_p': 1.0,
        'V_rd': connection['V_bolt_resistance'],
        'T_rd': connection['N_bolt_resistance'],
        'combined_utilization': connection['U_c_bolt'],
        'passes': connection['passes'],
    }
