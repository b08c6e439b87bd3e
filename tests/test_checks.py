# File: tests/test_checks.py
"""
TEST: INDIVIDUAL STRUCTURAL CHECKS
==================================

Each check is a pure function returning a dict of rounded values plus a
`passes` flag. These tests pin the formulas to hand calculations on a
typical case (6 mm angle, 500 mm centres, 14 kN/m characteristic load):

    V_ed = 14 × 1.35 × 0.5 = 9.45 kN
    Ecc  = 102.5 / 3       = 34.1667 mm
"""

import math

import pytest

from masonry_support.channels import load_channel_store
from masonry_support.checks import (
    calculate_mathematical_model,
    verify_moment_resistance,
    verify_shear_resistance,
    verify_angle_deflection,
    secant_modulus,
    verify_angle_to_bracket_connection,
    verify_shear_reduction_due_to_packers,
    packer_pass_through,
    calculate_tensile_load,
    verify_fixing,
    verify_combined_tension_shear,
    verify_steel_fixing,
    verify_steel_frame_fixing,
    verify_edge_distance,
    required_edge_distance,
    steel_fixing_methods,
    steel_bolt_sizes,
    verify_dropping_below_slab,
    verify_total_deflection,
    verify_bracket_design,
)
from masonry_support.inputs import BLIND_BOLT, SET_SCREW
from masonry_support.materials import DEFAULT_MATERIAL

V_ED = 9.45


# ============================================================================
# MATHEMATICAL MODEL
# ============================================================================

def test_mathematical_model():
    """
    d=12, T=R=6, bearing b=72, leg A=60:
        Ecc = 34.1667
        a   = 12 + 34.1667 - 12 + π·9
        b   = 72 - 34.1667 = 37.8333
        I   = 60 - 12 - 16.5 = 31.5
    """
    model = calculate_mathematical_model(d=12, T=6, R=6, L_bearing=72, A=60,
                                         facade_thickness=102.5, load_position=1 / 3)
    assert model['Ecc'] == 34.166666666667
    assert model['a'] == pytest.approx(34.166666666667 + math.pi * 9, abs=1e-9)
    assert model['b'] == pytest.approx(37.833333333333, abs=1e-9)
    assert model['I'] == 31.5
    print(f"✓ Ecc={model['Ecc']}, I={model['I']}")


def test_masonry_thickness_equals_one_third_facade():
    by_masonry = calculate_mathematical_model(d=12, T=6, R=6, L_bearing=72, A=60, M=102.5)
    by_facade = calculate_mathematical_model(d=12, T=6, R=6, L_bearing=72, A=60,
                                             facade_thickness=102.5, load_position=1 / 3)
    assert by_masonry == by_facade


def test_model_needs_a_thickness():
    with pytest.raises(ValueError):
        calculate_mathematical_model(d=12, T=6, R=6, L_bearing=72, A=60)


# ============================================================================
# ANGLE: MOMENT, SHEAR, DEFLECTION
# ============================================================================

def test_moment_resistance():
    """L_1 = 30 + 12 + 8 = 50; M_ed = 10 × 0.05 = 0.5 kNm."""
    Z = 500 * 8 ** 2 / 6
    result = verify_moment_resistance(10.0, 30.0, 12.0, 8.0, Z)
    assert result['L_1'] == 50
    assert result['M_ed_angle'] == 0.5
    assert result['Mc_rd_angle'] == pytest.approx(Z / 1e6 * 210 / 1.1, abs=1e-12)
    assert result['utilization'] == pytest.approx(0.5 / result['Mc_rd_angle'] * 100, abs=1e-9)
    assert result['passes']


def test_moment_resistance_fails_when_overloaded():
    result = verify_moment_resistance(100.0, 30.0, 12.0, 3.0, 500 * 9 / 6)
    assert result['utilization'] > 100
    assert not result['passes']


def test_shear_resistance():
    result = verify_shear_resistance(V_ED, 3000.0)
    expected = 3000 * (210 / math.sqrt(3)) / 1.1 / 1000
    assert result['VR_d_angle'] == pytest.approx(expected, abs=1e-9)
    assert result['shearResistance'] == result['VR_d_angle']
    assert result['appliedShear'] == V_ED
    assert result['passes']


def test_secant_modulus():
    """At σ = F_y: Es = E / (1 + 0.002·E/F_y)."""
    assert secant_modulus(0.0) == DEFAULT_MATERIAL.E
    assert secant_modulus(210.0) == pytest.approx(200000 / (1 + 0.002 * 200000 / 210))
    assert secant_modulus(50.0) < DEFAULT_MATERIAL.E


def test_angle_deflection():
    model = calculate_mathematical_model(d=12, T=6, R=6, L_bearing=72, A=60, M=102.5)
    moment = verify_moment_resistance(V_ED, model['Ecc'], 12, 6, 3000)
    result = verify_angle_deflection(
        V_ED, moment['L_1'], moment['M_ed_angle'], 3000,
        model['a'], model['b'], model['I'], 90, 9000,
    )
    assert result['V_ek'] == pytest.approx(V_ED / 1.35)
    assert result['Es_1'] == result['Es_sr']
    assert result['Es_1'] < DEFAULT_MATERIAL.E
    assert result['totalDeflection'] == pytest.approx(result['D_tip'] + result['D_heel'], abs=1e-9)
    assert result['passes'] == (result['totalDeflection'] <= 1.5)
    print(f"✓ Angle deflection {result['totalDeflection']:.3f} mm")


# ============================================================================
# ANGLE-TO-BRACKET BOLT AND PACKERS
# ============================================================================

def connection(bolt_diameter):
    # B=90, b=37.8333, I=31.5 from the model above
    return verify_angle_to_bracket_connection(V_ED, 90, 37.833333333333, 31.5, bolt_diameter)


def test_bolt_resistances():
    """
    M12 (As = 84.3):
        V_rd = 0.5 × 700 × 84.3 / 1.25 / 1000 = 23.604 kN
        N_rd = 0.9 × 84.3 × 700 / 1.25 / 1000 = 42.4872 kN
    """
    result = connection(12)
    assert result['V_bolt_resistance'] == pytest.approx(23.604, abs=1e-9)
    assert result['N_bolt_resistance'] == pytest.approx(42.4872, abs=1e-9)
    assert result['M_b'] == pytest.approx(9.45 * (90 - 37.833333333333 + 10) / 1000, abs=1e-9)
    assert result['N_bolt'] == pytest.approx(result['M_b'] / 0.0315, abs=1e-9)


def test_m12_passes_where_m10_fails():
    """M10 runs out at this load (U_c ≈ 104 %), M12 does not (≈ 71 %)."""
    m10 = connection(10)
    m12 = connection(12)
    assert not m10['passes']
    assert m10['U_c_bolt'] == pytest.approx(103.8, abs=0.1)
    assert m12['passes']
    assert m12['U_c_bolt'] == pytest.approx(71.4, abs=0.1)


def test_packer_reduction():
    """β_p = 9·12 / (8·12 + 3·10) = 0.857."""
    conn = connection(12)
    packer = verify_shear_reduction_due_to_packers(
        V_ED, conn['N_bolt'], conn['V_bolt_resistance'], conn['N_bolt_resistance'], 10, 12,
    )
    assert packer['beta_p'] == pytest.approx(108 / 126, abs=1e-12)
    assert packer['V_rd'] == pytest.approx(conn['V_bolt_resistance'] * 108 / 126, abs=1e-9)
    assert packer['combined_utilization'] > conn['U_c_bolt']
    assert packer['passes']


def test_thin_packer_has_no_reduction():
    conn = connection(12)
    packer = verify_shear_reduction_due_to_packers(
        V_ED, conn['N_bolt'], conn['V_bolt_resistance'], conn['N_bolt_resistance'], 0, 12,
    )
    assert packer['beta_p'] == 1.0
    assert packer['combined_utilization'] == pytest.approx(conn['U_c_bolt'], abs=1e-9)


def test_packer_pass_through():
    conn = connection(10)
    packer = packer_pass_through(conn, 10)
    assert packer['t_p'] == 0.0
    assert packer['combined_utilization'] == conn['U_c_bolt']
    assert packer['passes'] == conn['passes']


# ============================================================================
# FIXING
# ============================================================================

def test_tensile_load_satisfies_equilibrium():
    """1 kNm over a 100 mm rise needs a bit more than M/x = 10 kN."""
    result = calculate_tensile_load(1.0, 56, 100, 30)
    assert result['tensileLoad'] == pytest.approx(10.432, abs=0.01)
    assert result['momentEquilibriumPasses']
    assert result['shearEquilibriumPasses']
    assert result['depthCheckPasses']
    assert 0 < result['compressionZoneLength'] < 100


def test_negative_discriminant_is_zeroed_and_fails():
    result = calculate_tensile_load(1.0, 56, 10, 30)
    assert result['tensileLoad'] == 0.0
    assert not result['momentEquilibriumPasses']
    assert not result['depthCheckPasses']
    print("✓ Impossible stress block reported, not raised")


@pytest.fixture
def store():
    return load_channel_store()


def test_fixing_passes_at_light_load(store):
    result = verify_fixing(2.0, 120, 102.5, 135, "CPRO38", 225, 500, store)
    assert result['channelSpecId'] == "CPRO38_225_500"
    assert result['channelTensionCapacity'] == 14.25
    assert result['channelShearCapacity'] == 16.6
    assert result['appliedMoment'] == pytest.approx(2.0 * (120 + 102.5 / 3) / 1000, abs=1e-12)
    assert result['channel_note'] is None
    assert result['passes']


def test_fixing_fails_when_tension_exceeds_channel(store):
    """9.45 kN at 254 mm lever over a 110 mm rise ≈ 24 kN > 14.25 kN."""
    result = verify_fixing(V_ED, 220, 102.5, 110, "CPRO38", 225, 500, store)
    assert result['tensileForce'] > 14.25
    assert not result['channelTensionCheckPasses']
    assert not result['passes']


def test_missing_channel_row_fails_with_note(store):
    result = verify_fixing(2.0, 120, 102.5, 135, "CPRO38", 225, 550, store)
    assert result['channelSpecId'] is None
    assert result['channelTensionCapacity'] is None
    assert "CPRO38" in result['channel_note']
    assert not result['passes']


def test_combined_requires_both_formulas():
    """
    Ratios 0.62 / 0.62:
        formula 1 = 2 × 0.62^1.5 = 0.976  (ok)
        formula 2 = 1.24 / 1.2  = 1.033  (fails)
    """
    ok = verify_combined_tension_shear(5.0, 5.0, 10.0, 10.0)
    assert ok['passes']

    result = verify_combined_tension_shear(6.2, 6.2, 10.0, 10.0)
    assert result['U_combined_1'] <= 1.0
    assert result['U_combined_2'] > 1.0
    assert not result['passes']


def test_combined_with_zero_capacity_fails():
    result = verify_combined_tension_shear(5.0, 5.0, 0.0, 0.0)
    assert math.isinf(result['U_combined_1'])
    assert not result['passes']


# ============================================================================
# STEEL-FRAME FIXING
# ============================================================================

@pytest.mark.parametrize("bolt_size, required", [("M10", 13.2), ("M12", 15.6), ("M16", 21.6)])
def test_required_edge_distance(bolt_size, required):
    """1.2 × clearance hole (11, 13, 18 mm)."""
    assert required_edge_distance(bolt_size) == required
    assert verify_edge_distance(required, bolt_size)["passes"]


def test_edge_distances():
    assert not verify_edge_distance(15.0, "M12")['passes']
    assert verify_edge_distance(20.0, "M12")['passes']
    with pytest.raises(ValueError):
        verify_edge_distance(20.0, "M20")


def test_fixing_method_rules():
    assert steel_fixing_methods("RHS", SET_SCREW) == [BLIND_BOLT]
    assert steel_fixing_methods("SHS", "both") == [BLIND_BOLT]
    assert steel_fixing_methods("I-BEAM", "both") == [SET_SCREW, BLIND_BOLT]
    assert steel_fixing_methods("I-BEAM", SET_SCREW) == [SET_SCREW]
    assert steel_bolt_sizes("all") == ["M10", "M12", "M16"]
    assert steel_bolt_sizes("M12") == ["M12"]


def test_steel_fixing_interaction():
    """10/26.2 + 10/(1.4 × 30.3) = 0.617."""
    result = verify_steel_fixing(10.0, 10.0, SET_SCREW, "M12")
    assert result['combinedUtilization'] == pytest.approx(10 / 26.2 + 10 / (1.4 * 30.3), abs=1e-9)
    assert result['passes']


def test_steel_frame_fixing_has_channel_keys():
    result = verify_steel_frame_fixing(5.0, 120, 102.5, 100, SET_SCREW, "M12")
    assert result['tensileForce'] == pytest.approx(5.0 * (120 + 102.5 / 3) / 100, abs=1e-9)
    assert result['channelTensionCapacity'] == 30.3
    assert result['edgeDistanceResults']['passes']
    assert result['passes']

    tight = verify_steel_frame_fixing(5.0, 120, 102.5, 12, SET_SCREW, "M12")
    assert not tight['edgeDistanceResults']['passes']
    assert not tight['passes']


# ============================================================================
# SYSTEM DEFLECTION AND BRACKET
# ============================================================================

def test_no_drop_gives_no_heel_rotation():
    result = verify_dropping_below_slab(0, 0, 7.0, 220, 34.17, 190, 3, 37.83)
    assert result['D_heel_2'] == 0.0
    assert result['passes']


def test_drop_rotates_heel():
    result = verify_dropping_below_slab(50, 0, 7.0, 220, 34.17, 190, 3, 37.83)
    assert result['P_eff'] == 50
    assert result['D_heel_2'] > 0
    assert result['passes']

    notched = verify_dropping_below_slab(50, 80, 7.0, 220, 34.17, 190, 3, 37.83)
    assert notched['P_eff'] == 80
    assert notched['D_heel_2'] > result['D_heel_2']


def test_total_deflection_adds_span():
    """span = 5 × 6 × 1000 × 500³ / (384 × 150000 × 255683) ≈ 0.255 mm."""
    result = verify_total_deflection(0.5, 0.1, 150000, 500, 6, 6)
    span = 5 * 6 * 1000 * 500 ** 3 / (384 * 150000 * 255683)
    assert result['Ixx_3'] == 255683
    assert result['Addition_deflection_span'] == pytest.approx(span, abs=1e-9)
    assert result['Total_deflection_of_system'] == pytest.approx(0.6 + span, abs=1e-9)
    assert result['passes']

    without_span = verify_total_deflection(0.5, 0.1, 150000, 500, 6, 6, include_span=False)
    assert without_span['Total_deflection_of_system'] == pytest.approx(0.6)


def test_total_deflection_unknown_thickness_fails():
    result = verify_total_deflection(0.5, 0.1, 150000, 500, 6, 7)
    assert result['Ixx_3'] == 0
    assert not result['passes']


def test_bracket_design():
    """
    d_c = 175, M_ed = 9.45 × (200 + 34.17) / 1000 = 2.213 kNm
    W   = 1.2 × 3 × 175² / 6 × 2 = 36750 mm³
    M_rd = 210 × 36750 / 1.1e6 = 7.016 kNm
    """
    result = verify_bracket_design(V_ED, 200, 34.166666666667, 175, 0, 3)
    assert result['W_pl_c'] == pytest.approx(36750)
    assert result['M_rd_bracket'] == pytest.approx(210 * 36750 / 1.1e6, abs=1e-9)
    assert result['M_ed_bracket'] == pytest.approx(9.45 * 234.166666666667 / 1000, abs=1e-9)
    assert result['is_class_1']
    assert result['passes']


def test_notch_reduces_bracket_depth():
    plain = verify_bracket_design(V_ED, 200, 34.17, 175, 0, 3)
    notched = verify_bracket_design(V_ED, 200, 34.17, 175, 50, 3)
    assert notched['d_c'] == 125
    assert notched['M_rd_bracket'] < plain['M_rd_bracket']
