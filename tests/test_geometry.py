# File: tests/test_geometry.py
"""
TEST: GEOMETRY RESOLVER
=======================

WHY THESE TESTS?
----------------
Every check downstream uses the bracket height and rise-to-bolts from here.
A wrong sign or a missed leg allowance silently changes the weight of every
candidate, so each entry of the (bracket, angle) decision table is pinned to
a hand calculation.

Hand calculations use Y = 40 mm (bracket top to fixing) and the 15 mm slot
allowance:
    Standard bracket:  H = |support| - fixing + 40 (+ leg if angle inverted)
    Inverted bracket:  H = above SSL + fixing + Dim D (+ leg if angle standard)
"""

import pytest

from masonry_support.errors import InfeasibleGeometry, AngleExtensionError
from masonry_support.geometry import GEOMETRY_RULES, resolve_geometry, height_above_ssl
from masonry_support.inputs import DesignInputs, GeneticParameters, STANDARD, INVERTED


def make_params(bracket_type, angle_orientation, fixing_position=75.0, angle_thickness=6, dim_d=None):
    return GeneticParameters(
        bracket_centres=500,
        bracket_thickness=3,
        angle_thickness=angle_thickness,
        bolt_diameter=12,
        bracket_type=bracket_type,
        angle_orientation=angle_orientation,
        fixing_position=fixing_position,
        dim_d=dim_d,
        channel_type="CPRO38",
    )


def make_inputs(support_level, slab_thickness=225, **kwargs):
    return DesignInputs(
        slab_thickness=slab_thickness,
        cavity=100,
        support_level=support_level,
        characteristic_load=6.0,
        **kwargs,
    )


def test_decision_table_is_closed():
    assert set(GEOMETRY_RULES) == {
        (STANDARD, STANDARD), (STANDARD, INVERTED), (INVERTED, STANDARD), (INVERTED, INVERTED),
    }


def test_unknown_combination_is_infeasible():
    params = make_params("Sideways", STANDARD)
    with pytest.raises(InfeasibleGeometry):
        resolve_geometry(params, make_inputs(-200))


def test_standard_bracket_standard_angle():
    """
    support -200, fixing 75:
        H    = 200 - 75 + 40 = 165
        rise = 165 - 55 = 110 (bottom-edge cap 150 - 15 = 135 does not bind)
    """
    geometry = resolve_geometry(make_params(STANDARD, STANDARD), make_inputs(-200))
    assert geometry.bracket_height == 165
    assert geometry.rise_to_bolts == 110
    assert geometry.rise_to_bolts_display == 125
    assert geometry.drop_below_slab == 0
    assert geometry.dim_d is None
    assert geometry.vertical_leg == 60
    assert geometry.design_cavity == 120
    assert geometry.bracket_projection == 90
    assert not geometry.uses_extended_geometry
    print(f"✓ Standard/Standard: H={geometry.bracket_height}, rise={geometry.rise_to_bolts}")


def test_standard_bracket_inverted_angle_adds_leg():
    """H = 165 + 60 = 225; rise capped at the bottom edge: 150 - 15 = 135."""
    geometry = resolve_geometry(make_params(STANDARD, INVERTED), make_inputs(-200))
    assert geometry.bracket_height == 225
    assert geometry.rise_to_bolts == 135


def test_standard_bracket_minimum_height():
    """H = 100 - 75 + 40 = 65 -> raised to 150 mm; rise = 95."""
    geometry = resolve_geometry(make_params(STANDARD, STANDARD), make_inputs(-100))
    assert geometry.bracket_height == 150
    assert geometry.rise_to_bolts == 95


def test_drop_below_slab_and_notch():
    """
    support -300 on a 225 slab, fixing 100:
        H    = 300 - 100 + 40 = 240
        drop = 300 - 225 = 75
        rise = min(240 - 55, 150 - 15) = 135
    A 100 mm notch takes away the 25 mm it extends past the drop.
    """
    params = make_params(STANDARD, STANDARD, fixing_position=100)
    geometry = resolve_geometry(params, make_inputs(-300))
    assert geometry.bracket_height == 240
    assert geometry.drop_below_slab == 75
    assert geometry.rise_to_bolts == 135

    notched = resolve_geometry(params, make_inputs(-300, notch_height=100))
    assert notched.rise_to_bolts == 110


def test_notch_consuming_rise_is_infeasible():
    params = make_params(STANDARD, STANDARD, fixing_position=100)
    with pytest.raises(InfeasibleGeometry):
        resolve_geometry(params, make_inputs(-300, notch_height=300))


def test_height_above_ssl():
    assert height_above_ssl(50, 6) == 56
    assert height_above_ssl(50, 8) == 43


def test_inverted_bracket_inverted_angle():
    """
    support +50, slab 225, fixing 75, T=6:
        above = 50 + 6 = 56
        Dim D = max(120, 150 - 15) + 15 = 150   (heel at the soffit)
        H     = 56 + 75 + 150 = 281
        rise  = 150 - 15 = 135
    """
    geometry = resolve_geometry(make_params(INVERTED, INVERTED), make_inputs(50))
    assert geometry.dim_d == 150
    assert geometry.height_above_ssl == 56
    assert geometry.height_below_ssl == 225
    assert geometry.bracket_height == 281
    assert geometry.rise_to_bolts == 135
    assert geometry.drop_below_slab == 0
    print(f"✓ Inverted/Inverted: Dim D={geometry.dim_d}, H={geometry.bracket_height}")


def test_inverted_bracket_standard_angle_adds_leg():
    geometry = resolve_geometry(make_params(INVERTED, STANDARD), make_inputs(50))
    assert geometry.bracket_height == 281 + 60


def test_inverted_eight_mm_angle():
    """T=8: above = 50 - 7 = 43, leg 75."""
    geometry = resolve_geometry(make_params(INVERTED, STANDARD, angle_thickness=8), make_inputs(50))
    assert geometry.height_above_ssl == 43
    assert geometry.vertical_leg == 75
    assert geometry.bracket_height == 43 + 225 + 75


def test_custom_dim_d_clamped_to_minimum():
    geometry = resolve_geometry(make_params(INVERTED, INVERTED, dim_d=100), make_inputs(50))
    assert geometry.dim_d == 130
    assert geometry.rise_to_bolts == 115


def test_dim_d_outside_slab_is_infeasible():
    with pytest.raises(InfeasibleGeometry):
        resolve_geometry(make_params(INVERTED, INVERTED, dim_d=200), make_inputs(50))

    # 200 slab, fixing 100: minimum Dim D 135 cannot fit in 100 mm
    with pytest.raises(InfeasibleGeometry):
        resolve_geometry(make_params(INVERTED, INVERTED, fixing_position=100),
                         make_inputs(50, slab_thickness=200))


# ============================================================================
# ANGLE EXTENSION
# ============================================================================

def extension_inputs(support_level, limit, slab_thickness=225):
    return make_inputs(
        support_level,
        slab_thickness=slab_thickness,
        enable_angle_extension=True,
        max_allowable_bracket_extension=limit,
    )


def test_standard_extension_shortens_bracket_and_lengthens_leg():
    """
    support -300, fixing 75: H = 265, bottom at 75 + 265 - 40 = 300 mm.
    Limit -280 -> H = 280 - 75 + 40 = 245, reduction 20, leg 60 + 20 = 80.
    """
    geometry = resolve_geometry(make_params(STANDARD, STANDARD), extension_inputs(-300, -280))
    ext = geometry.angle_extension
    assert geometry.uses_extended_geometry
    assert ext.original_bracket_height == 265
    assert ext.limited_bracket_height == 245
    assert ext.bracket_reduction == 20
    assert ext.extended_angle_height == 80
    assert geometry.bracket_height == 245
    assert geometry.vertical_leg == 80
    assert geometry.original_vertical_leg == 60
    assert geometry.to_dict()['angle_extension'] == 20
    print(f"✓ Extension: bracket -{ext.bracket_reduction}mm, angle leg {ext.extended_angle_height}mm")


def test_limit_not_reached_leaves_geometry_alone():
    geometry = resolve_geometry(make_params(STANDARD, STANDARD), extension_inputs(-300, -310))
    assert geometry.angle_extension is None
    assert geometry.bracket_height == 265


def test_limit_ignored_when_extension_disabled():
    inputs = make_inputs(-300, max_allowable_bracket_extension=-280)
    geometry = resolve_geometry(make_params(STANDARD, STANDARD), inputs)
    assert geometry.angle_extension is None


def test_limited_bracket_below_minimum_fails():
    """Limit -180 -> H = 145 < 150."""
    with pytest.raises(AngleExtensionError):
        resolve_geometry(make_params(STANDARD, STANDARD), extension_inputs(-200, -180))


def test_extended_leg_above_maximum_fails():
    """Reduction of 400 mm would make a 460 mm leg."""
    with pytest.raises(AngleExtensionError):
        resolve_geometry(make_params(STANDARD, STANDARD), extension_inputs(-700, -300, slab_thickness=500))


def test_inverted_extension_above_slab_flips_standard_angle():
    """above = 56 > limit 40: reduction 16, H 341 -> 325, leg 76."""
    geometry = resolve_geometry(make_params(INVERTED, STANDARD), extension_inputs(50, 40))
    ext = geometry.angle_extension
    assert ext.bracket_reduction == 16
    assert geometry.bracket_height == 325
    assert geometry.height_above_ssl == 40
    assert geometry.vertical_leg == 76
    assert ext.orientation_flipped
    assert ext.final_angle_orientation == INVERTED


def test_inverted_angle_not_flipped():
    geometry = resolve_geometry(make_params(INVERTED, INVERTED), extension_inputs(50, 40))
    assert not geometry.angle_extension.orientation_flipped
    assert geometry.angle_extension.final_angle_orientation == INVERTED


def test_inverted_heel_inside_zone_below_slab_fails():
    """Heel at 75 + 150 = 225 mm below SSL."""
    with pytest.raises(AngleExtensionError):
        resolve_geometry(make_params(INVERTED, INVERTED), extension_inputs(50, -200))

    geometry = resolve_geometry(make_params(INVERTED, INVERTED), extension_inputs(50, -250))
    assert geometry.angle_extension is None
