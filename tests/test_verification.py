# File: tests/test_verification.py
"""
TEST: VERIFICATION PIPELINE (END TO END)
========================================

WHY THESE TESTS?
----------------
The individual checks are tested in isolation; here the question is whether
verify_all() wires them together correctly:
- Loading and eccentricity reach every stage
- Stages run (and are observed) in a fixed order
- Overall pass = AND of the ten checks

REFERENCE CASE:
---------------
Slab 225, cavity 200, support -200, 14 kN/m at 500 mm centres, 6 mm angle,
3 mm bracket, M12 bolt, CPRO38 channel, fixing 75 mm:
    design UDL = 18.9 kN/m, V_ed = 9.45 kN
    C' = 220 mm, Ecc = 34.1667 mm
At this load the CPRO38 channel is overloaded in tension, so the fixing and
the combined interaction fail while the angle, bolt, packer, deflection
and bracket checks pass. At 4 kN/m everything passes.
"""

import logging

import pytest

from masonry_support.channels import load_channel_store
from masonry_support.geometry import ResolvedGeometry, resolve_geometry
from masonry_support.inputs import DesignInputs, GeneticParameters, STANDARD
from masonry_support.verification import verify_all, TraceRecorder, LoggingTrace, CHECK_NAMES

EXPECTED_STAGES = [
    'loading',
    'angle_parameters',
    'mathematical_model',
    'shear',
    'moment',
    'deflection',
    'angle_to_bracket',
    'fixing',
    'combined',
    'dropping_below_slab',
    'total_deflection',
    'packer',
    'bracket_design',
    'overall',
]


def reference_inputs(load=14.0):
    return DesignInputs(
        slab_thickness=225,
        cavity=200,
        support_level=-200,
        characteristic_load=load,
        facade_thickness=102.5,
        load_position=1 / 3,
        isolation_shim_thickness=3,
        front_offset=12,
        packer_thickness=10,
    )


REFERENCE_PARAMS = GeneticParameters(
    bracket_centres=500,
    bracket_thickness=3,
    angle_thickness=6,
    bolt_diameter=12,
    bracket_type=STANDARD,
    angle_orientation=STANDARD,
    fixing_position=75.0,
    channel_type="CPRO38",
)


def run(inputs, trace=None):
    store = load_channel_store()
    geometry = resolve_geometry(REFERENCE_PARAMS, inputs, store.edge_distances("CPRO38", 225, 500))
    return verify_all(inputs, REFERENCE_PARAMS, geometry, store, trace=trace)


def test_reference_case_values():
    result = run(reference_inputs())

    assert result.loading.design_udl == pytest.approx(18.9, abs=1e-12)
    assert result.loading.shear_force == pytest.approx(9.45, abs=1e-12)
    assert result.mathematical_model['Ecc'] == 34.166666666667
    assert result.angle_parameters['horizontal_leg'] == 90
    assert result.angle_parameters['d'] == 12

    assert result.moment['passes']
    assert result.shear['passes']
    assert result.deflection['passes']
    assert result.angle_to_bracket['passes']
    assert result.packer['passes']
    assert result.total_deflection['passes']
    assert result.bracket_design['passes']
    assert result.dropping_below_slab['D_heel_2'] == 0.0

    assert result.fixing['channelSpecId'] == "CPRO38_225_500"
    assert result.fixing['tensileForce'] > 14.25
    assert set(result.failed_checks()) == {'fixing', 'combined'}
    assert not result.passes
    print(f"✓ Reference case: failing {result.failed_checks()}")


def test_light_load_passes_everything():
    result = run(reference_inputs(load=4.0))
    assert result.failed_checks() == []
    assert result.passes
    summary = result.summary()
    assert summary['passes']
    assert summary['moment_utilization'] < 100


def test_overall_is_and_of_checks():
    for load in (4.0, 14.0):
        result = run(reference_inputs(load))
        assert result.passes == all(result.check(name)['passes'] for name in CHECK_NAMES)


def test_trace_recorder_sees_every_stage_in_order():
    recorder = TraceRecorder()
    result = run(reference_inputs(), trace=recorder)

    assert recorder.stages == EXPECTED_STAGES
    assert recorder.records[-1] == ('overall', {'passes': result.passes})

    frame = recorder.to_frame()
    assert list(frame.columns) == ['stage', 'field', 'value']
    ecc = frame[(frame.stage == 'mathematical_model') & (frame.field == 'Ecc')]
    assert ecc['value'].iloc[0] == 34.166666666667
    print(f"✓ Trace captured {len(frame)} values over {len(recorder.stages)} stages")


def test_no_trace_gives_same_result():
    assert run(reference_inputs()) == run(reference_inputs(), trace=TraceRecorder())


def test_logging_trace(caplog):
    caplog.set_level(logging.DEBUG, logger="masonry_support.verification")
    run(reference_inputs(), trace=LoggingTrace())
    stage_records = [r for r in caplog.records if getattr(r, 'stage', None)]
    assert [r.stage for r in stage_records] == EXPECTED_STAGES


# ============================================================================
# FIXED-GEOMETRY FIXTURE
# ============================================================================
# Bracket 175 mm high, 4 mm thick, rise to bolts 120 mm, M10 bolt, 6 mm angle
# with a 60 mm leg, given directly instead of resolved.

FIXTURE_PARAMS = GeneticParameters(
    bracket_centres=500,
    bracket_thickness=4,
    angle_thickness=6,
    bolt_diameter=10,
    bracket_type=STANDARD,
    angle_orientation=STANDARD,
    fixing_position=75.0,
    channel_type="CPRO38",
)

FIXTURE_GEOMETRY = ResolvedGeometry(
    bracket_type=STANDARD,
    angle_orientation=STANDARD,
    bracket_height=175.0,
    bracket_projection=190.0,
    design_cavity=220.0,
    rise_to_bolts=120.0,
    rise_to_bolts_display=135.0,
    dim_d=None,
    drop_below_slab=0.0,
    height_above_ssl=0.0,
    height_below_ssl=175.0,
    vertical_leg=60.0,
    original_vertical_leg=60.0,
    top_edge=75.0,
    bottom_edge=150.0,
)


def test_fixed_geometry_fixture_utilizations():
    """
    Every stage pinned to its hand-calculated value.

    Angle (d = 12, b = 72, Z = 3000, Av = 3000, L_1 = 52.1667):
        moment   = 9.45·L_1/1000 / (0.003·210/1.1) = 1.65·L_1  = 86.075 %
        shear    = 9.45 / (3000·210/√3/1.1/1000)   = 1.65·√3   = 2.858 %
    M10 bolt (I = 31.5, M_b = 9.45·62.1667/1000, N = 18.65 kN):
        U_c      = 9.45/16.24 + 18.65/(1.4·29.232)             = 103.761 %
        packer   β_p = 90/110, U = 9.45/(β_p·16.24) + 45.571   = 116.692 %
    Channel (L = 220 + 34.1667, M = 2.401875 kNm, x = 120, w = 56, f = 30):
        T        = smaller root of (2/3)/(f·w)·T² - x·T + M    ≈ 21.552 kN
        N/N_rd   = 21.552/14.25, V/V_rd = 9.45/16.6
        U_1      ≈ 2.289, U_2 ≈ 1.735
    Bracket: M_ed = 9.45·234.1667/1000 = 2.212875, W = 49000, M_rd = 9.3545
    """
    inputs = reference_inputs()
    result = verify_all(inputs, FIXTURE_PARAMS, FIXTURE_GEOMETRY, load_channel_store())

    assert result.loading.design_udl == pytest.approx(18.9, abs=1e-12)
    assert result.loading.shear_force == pytest.approx(9.45, abs=1e-12)
    assert result.mathematical_model['Ecc'] == 34.166666666667
    assert result.mathematical_model['I'] == 31.5

    assert result.moment['utilization'] == pytest.approx(86.075, rel=1e-9)
    assert result.shear['utilization'] == pytest.approx(1.65 * 3 ** 0.5, rel=1e-9)
    assert result.deflection['totalDeflection'] == pytest.approx(0.9272, abs=0.002)
    assert result.deflection['utilization'] == pytest.approx(61.82, abs=0.15)

    assert result.angle_to_bracket['N_bolt'] == pytest.approx(18.65, rel=1e-9)
    assert result.angle_to_bracket['V_bolt_resistance'] == pytest.approx(16.24, rel=1e-9)
    assert result.angle_to_bracket['U_c_bolt'] == pytest.approx(103.761, abs=1e-3)
    assert result.packer['beta_p'] == pytest.approx(9 / 11, rel=1e-9)
    assert result.packer['combined_utilization'] == pytest.approx(116.692, abs=1e-3)

    assert result.fixing['appliedMoment'] == pytest.approx(2.401875, rel=1e-9)
    assert result.fixing['tensileForce'] == pytest.approx(21.5516, abs=1e-3)
    assert result.fixing['tensileLoadResults']['compressionZoneLength'] == pytest.approx(25.657, abs=1e-2)
    assert result.fixing['channelCombinedUtilization'] == pytest.approx(1.7347, abs=1e-3)
    assert result.combined['U_combined_1'] == pytest.approx(2.2895, abs=1e-3)
    assert result.combined['U_combined_2'] == pytest.approx(1.7347, abs=1e-3)

    assert result.dropping_below_slab['D_heel_2'] == 0.0
    assert result.total_deflection['Addition_deflection_span'] == pytest.approx(0.4643, abs=0.002)
    assert result.total_deflection['Total_deflection_of_system'] == pytest.approx(1.3915, abs=0.003)

    assert result.bracket_design['M_ed_bracket'] == pytest.approx(2.212875, rel=1e-9)
    assert result.bracket_design['W_pl_c'] == pytest.approx(49000.0)
    assert result.bracket_design['M_rd_bracket'] == pytest.approx(210 * 49000 / 1.1e6, rel=1e-9)
    assert result.bracket_design['is_class_1']

    # Under these formulas the M10 bolt and the CPRO38 channel are overloaded
    assert result.failed_checks() == ['angle_to_bracket', 'combined', 'fixing', 'packer']
    assert not result.passes
    print(f"✓ Fixed-geometry fixture: failing {result.failed_checks()}")
