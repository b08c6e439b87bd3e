# masonry_support/checks - Verification stages
"""Structural checks for the bracket/angle support (EN 1993-1-4 / EN 1993-1-8)."""

from .model import calculate_mathematical_model

from .angle import (
    verify_moment_resistance,
    verify_shear_resistance,
    verify_angle_deflection,
    secant_modulus,
)

from .connection import (
    verify_angle_to_bracket_connection,
    verify_shear_reduction_due_to_packers,
    packer_pass_through,
)

from .fixing import (
    STEEL_FIXING_CAPACITIES,
    calculate_tensile_load,
    verify_fixing,
    verify_combined_tension_shear,
    verify_steel_fixing,
    verify_steel_frame_fixing,
    verify_edge_distance,
    required_edge_distance,
    steel_fixing_methods,
    steel_bolt_sizes,
)

from .deflection import (
    verify_dropping_below_slab,
    verify_total_deflection,
)

from .bracket import verify_bracket_design

__all__ = [
    # Model
    'calculate_mathematical_model',
    # Angle
    'verify_moment_resistance',
    'verify_shear_resistance',
    'verify_angle_deflection',
    'secant_modulus',
    # Connection
    'verify_angle_to_bracket_connection',
    'verify_shear_reduction_due_to_packers',
    'packer_pass_through',
    # Fixing
    'STEEL_FIXING_CAPACITIES',
    'calculate_tensile_load',
    'verify_fixing',
    'verify_combined_tension_shear',
    'verify_steel_fixing',
    'verify_steel_frame_fixing',
    'verify_edge_distance',
    'required_edge_distance',
    'steel_fixing_methods',
    'steel_bolt_sizes',
    # Deflection
    'verify_dropping_below_slab',
    'verify_total_deflection',
    # Bracket
    'verify_bracket_design',
]
