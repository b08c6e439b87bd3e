# masonry_support/verification.py
"""
VERIFICATION ENGINE
===================

PURPOSE:
--------
Run the full, ordered chain of checks for one resolved candidate and
collect every intermediate value for the audit trail.

PIPELINE (order matters, later stages consume earlier results):
---------------------------------------------------------------
    0. loading                 design UDL, shear per bracket
    0. angle parameters        d, b, Z, Av, Ixx_1, horizontal leg
    1. mathematical model      Ecc, a, b, I
    2. shear                   angle shear (ULS)
    3. moment                  angle bending (ULS)
    4. deflection              angle toe deflection (SLS)
    5. angle_to_bracket        bolt shear + tension
    6. fixing                  channel (or steel-frame) fixing
    7. combined                channel tension/shear interaction
    8. dropping_below_slab     heel rotation from the drop
    9. total_deflection        angle + drop + span
   10. packer                  β_p reduction on the bolt
   11. bracket_design          bracket plate bending

passes = AND of the ten checked stages (the model has no pass/fail).

OBSERVING THE PIPELINE:
-----------------------
verify_all() takes an optional `trace` callable, called once per stage with
(stage_name, result_dict). Pass a TraceRecorder to keep the audit trail, or a
LoggingTrace to write it to a logger. There is no global "detailed" flag.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from .angle import calculate_angle_parameters
from .channels import ChannelSpecStore
from .checks import (
    calculate_mathematical_model,
    verify_shear_resistance,
    verify_moment_resistance,
    verify_angle_deflection,
    verify_angle_to_bracket_connection,
    verify_fixing,
    verify_steel_frame_fixing,
    verify_combined_tension_shear,
    verify_dropping_below_slab,
    verify_total_deflection,
    verify_shear_reduction_due_to_packers,
    packer_pass_through,
    verify_bracket_design,
)
from .geometry import ResolvedGeometry, AngleExtension
from .inputs import DesignInputs, GeneticParameters, INVERTED
from .loading import loading_for, LoadingResult
from .materials import MaterialProperties, SystemDefaults, DEFAULT_MATERIAL, SYSTEM_DEFAULTS

logger = logging.getLogger(__name__)

Trace = Callable[[str, Dict[str, Any]], None]

CHECK_NAMES = (
    'moment',
    'shear',
    'deflection',
    'angle_to_bracket',
    'combined',
    'fixing',
    'dropping_below_slab',
    'total_deflection',
    'packer',
    'bracket_design',
)


class TraceRecorder:
    """Collects (stage, payload) pairs in pipeline order."""

    def __init__(self):
        self.records: List[Tuple[str, Dict[str, Any]]] = []

    def __call__(self, stage: str, payload: Dict[str, Any]) -> None:
        self.records.append((stage, dict(payload)))

    @property
    def stages(self) -> List[str]:
        return [stage for stage, _ in self.records]

    def to_frame(self) -> pd.DataFrame:
        """Long-format table: one row per scalar field per stage."""
        rows = []
        for stage, payload in self.records:
            for key, value in payload.items():
                if isinstance(value, (dict, list, tuple)):
                    continue
                rows.append({'stage': stage, 'field': key, 'value': value})
        return pd.DataFrame(rows, columns=['stage', 'field', 'value'])


class LoggingTrace:
    """Writes every stage result to a logger."""

    def __init__(self, log: logging.Logger = logger, level: int = logging.DEBUG):
        self.log = log
        self.level = level

    def __call__(self, stage: str, payload: Dict[str, Any]) -> None:
        self.log.log(self.level, "stage %s: %s", stage, payload, extra={'stage': stage})


@dataclass(frozen=True)
class VerificationResult:
    """All check results for one candidate."""
    loading: LoadingResult
    angle_parameters: Dict[str, Any]
    mathematical_model: Dict[str, Any]
    moment: Dict[str, Any]
    shear: Dict[str, Any]
    deflection: Dict[str, Any]
    angle_to_bracket: Dict[str, Any]
    combined: Dict[str, Any]
    fixing: Dict[str, Any]
    dropping_below_slab: Dict[str, Any]
    total_deflection: Dict[str, Any]
    packer: Dict[str, Any]
    bracket_design: Dict[str, Any]
    passes: bool
    angle_extension: Optional[AngleExtension] = None
    uses_extended_geometry: bool = False

    def check(self, name: str) -> Dict[str, Any]:
        return getattr(self, name)

    def failed_checks(self) -> List[str]:
        return [name for name in CHECK_NAMES if not self.check(name)['passes']]

    def summary(self) -> Dict[str, Any]:
        """Flat pass/utilization view for reports."""
        return {
            'moment_utilization': self.moment['utilization'],
            'shear_utilization': self.shear['utilization'],
            'deflection_mm': self.deflection['totalDeflection'],
            'bolt_utilization': self.angle_to_bracket['U_c_bolt'],
            'fixing_tension_kN': self.fixing['tensileForce'],
            'combined_U1': self.combined['U_combined_1'],
            'combined_U2': self.combined['U_combined_2'],
            'system_deflection_mm': self.total_deflection['Total_deflection_of_system'],
            'packer_utilization': self.packer['combined_utilization'],
            'bracket_M_rd': self.bracket_design['M_rd_bracket'],
            'passes': self.passes,
        }


def _emit(trace: Optional[Trace], stage: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    if trace is not None:
        trace(stage, payload)
    return payload


def verify_all(
    inputs: DesignInputs,
    params: GeneticParameters,
    geometry: ResolvedGeometry,
    store: ChannelSpecStore,
    material: MaterialProperties = DEFAULT_MATERIAL,
    defaults: SystemDefaults = SYSTEM_DEFAULTS,
    trace: Optional[Trace] = None,
) -> VerificationResult:
    """
    Run every verification stage for one candidate.

    Parameters:
    -----------
    inputs : DesignInputs
        Design brief
    params : GeneticParameters
        Candidate parameters (thicknesses, centres, bolt, channel)
    geometry : ResolvedGeometry
        Output of resolve_geometry() for this candidate
    store : ChannelSpecStore
        Channel capacity table
    material : MaterialProperties
        Steel properties and partial factors
    defaults : SystemDefaults
        Fixed system geometry
    trace : callable, optional
        Observer called as trace(stage, result) for every stage

    Returns:
    --------
    VerificationResult
    """
    # ========================================================================
    # STAGE 0: LOADING AND SECTION PROPERTIES
    # ========================================================================
    loading = loading_for(inputs, params.bracket_centres, material)
    _emit(trace, 'loading', loading.__dict__)
    V_ed = loading.shear_force

    angle = _emit(trace, 'angle_parameters', calculate_angle_parameters(
        C=inputs.cavity,
        D=inputs.cavity - 10.0,
        S=inputs.isolation_shim_thickness,
        T=params.angle_thickness,
        B_cc=params.bracket_centres,
        facade_thickness=inputs.facade_thickness,
        isolation_shim_thickness=inputs.isolation_shim_thickness,
        front_offset=inputs.front_offset,
    ))
    B = angle['horizontal_leg']

    # ========================================================================
    # STAGE 1: MATHEMATICAL MODEL
    # ========================================================================
    model = _emit(trace, 'mathematical_model', calculate_mathematical_model(
        d=angle['d'],
        T=params.angle_thickness,
        R=angle['R'],
        L_bearing=angle['b'],
        A=geometry.vertical_leg,
        M=inputs.masonry_thickness,
        facade_thickness=inputs.facade_thickness,
        load_position=inputs.load_position,
    ))

    # ========================================================================
    # STAGES 2-4: ANGLE
    # ========================================================================
    shear = _emit(trace, 'shear', verify_shear_resistance(V_ed, angle['Av'], material))

    moment = _emit(trace, 'moment', verify_moment_resistance(
        V_ed, model['Ecc'], angle['d'], params.angle_thickness, angle['Z'], material
    ))

    deflection = _emit(trace, 'deflection', verify_angle_deflection(
        V_ed,
        moment['L_1'],
        moment['M_ed_angle'],
        angle['Z'],
        model['a'],
        model['b'],
        model['I'],
        B,
        angle['Ixx_1'],
        material,
        defaults.angle_deflection_limit,
    ))

    # ========================================================================
    # STAGE 5: ANGLE-TO-BRACKET BOLT
    # ========================================================================
    connection = _emit(trace, 'angle_to_bracket', verify_angle_to_bracket_connection(
        V_ed, B, model['b'], model['I'], params.bolt_diameter, material
    ))

    # ========================================================================
    # STAGES 6-7: FIXING AND CHANNEL INTERACTION
    # ========================================================================
    facade = inputs.facade_thickness if inputs.facade_thickness is not None else inputs.masonry_thickness
    load_position = inputs.load_position if inputs.load_position is not None else 1.0 / 3.0

    if inputs.is_steel_fixing:
        fixing = verify_steel_frame_fixing(
            V_ed,
            geometry.design_cavity,
            facade,
            geometry.rise_to_bolts,
            params.steel_fixing_method,
            params.steel_bolt_size,
            is_inverted=params.bracket_type == INVERTED,
            load_position=load_position,
            material=material,
        )
    else:
        fixing = verify_fixing(
            V_ed,
            geometry.design_cavity,
            facade,
            geometry.rise_to_bolts,
            params.channel_type,
            inputs.effective_slab_thickness,
            params.bracket_centres,
            store,
            base_plate_width=defaults.base_plate_width,
            concrete_grade=material.concrete_grade,
            load_position=load_position,
        )
    _emit(trace, 'fixing', fixing)
    if fixing.get('channel_note'):
        logger.debug("%s", fixing['channel_note'])

    combined = _emit(trace, 'combined', verify_combined_tension_shear(
        fixing['tensileForce'],
        fixing['appliedShear'],
        fixing['channelTensionCapacity'] or 0.0,
        fixing['channelShearCapacity'] or 0.0,
    ))

    # ========================================================================
    # STAGES 8-9: SYSTEM DEFLECTION
    # ========================================================================
    dropping = _emit(trace, 'dropping_below_slab', verify_dropping_below_slab(
        geometry.drop_below_slab,
        inputs.notch_height,
        V_ed / material.factors.load_factor,
        geometry.design_cavity,
        model['Ecc'],
        geometry.bracket_projection,
        params.bracket_thickness,
        angle['b'],
        material,
    ))

    total = _emit(trace, 'total_deflection', verify_total_deflection(
        deflection['totalDeflection'],
        dropping['D_heel_2'],
        deflection['Es_sr'],
        params.bracket_centres,
        loading.characteristic_udl,
        params.angle_thickness,
        include_span=defaults.include_span_deflection,
        limit=defaults.system_deflection_limit,
    ))

    # ========================================================================
    # STAGES 10-11: PACKER AND BRACKET
    # ========================================================================
    if inputs.packer_thickness:
        packer = verify_shear_reduction_due_to_packers(
            V_ed,
            connection['N_bolt'],
            connection['V_bolt_resistance'],
            connection['N_bolt_resistance'],
            inputs.packer_thickness,
            params.bolt_diameter,
            material,
        )
    else:
        packer = packer_pass_through(connection, params.bolt_diameter)
    _emit(trace, 'packer', packer)

    bracket = _emit(trace, 'bracket_design', verify_bracket_design(
        V_ed,
        inputs.cavity,
        model['Ecc'],
        geometry.bracket_height,
        inputs.notch_height,
        params.bracket_thickness,
        defaults.plates_per_channel,
        material,
    ))

    passes = all(stage['passes'] for stage in (
        moment, shear, deflection, connection, combined,
        fixing, dropping, total, packer, bracket,
    ))
    _emit(trace, 'overall', {'passes': passes})

    return VerificationResult(
        loading=loading,
        angle_parameters=angle,
        mathematical_model=model,
        moment=moment,
        shear=shear,
        deflection=deflection,
        angle_to_bracket=connection,
        combined=combined,
        fixing=fixing,
        dropping_below_slab=dropping,
        total_deflection=total,
        packer=packer,
        bracket_design=bracket,
        passes=bool(passes),
        angle_extension=geometry.angle_extension,
        uses_extended_geometry=geometry.uses_extended_geometry,
    )
