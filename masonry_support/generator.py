# masonry_support/generator.py
"""
PARAMETER SPACE GENERATOR
=========================

PURPOSE:
--------
Enumerate every candidate design (GeneticParameters) worth evaluating for a
brief. The space is a Cartesian product of small discrete axes:

    bracket centres      200..600 step 50
    bracket thickness    3, 4
    angle thickness      3, 4, 5, 6, 8
    bolt diameter        10, 12
    bracket/angle        from the support level (see below)
    fixing position      75..slab-75 step 5 (or the custom value)
    Dim D (inverted)     130..slab-fixing step 5 (or the custom value)
    channel type         CPRO38, CPRO50, R-HPTIII-70, R-HPTIII-90

CHEAP PRE-FILTERS:
------------------
Full verification costs far more than these rules, so they run first:

- Support level >= 0 (above the slab top) -> Inverted bracket only;
  below -> Standard bracket only. Both angle orientations are tried.
- Characteristic load > 5 kN/m -> centres <= 500.
- Load > 4 kN/m with the support more than 50 mm above the slab or below
  the soffit -> 4 mm brackets only.
- A channel with no capacity row for the (slab, centres) pair is skipped.

Exclusion-zone limits are NOT used to drop candidates here: the Geometry
Resolver applies angle extension (or rejects the candidate) later.

The output order is deterministic (nested loops over sorted axes).
"""

import logging
import math
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .channels import ChannelSpecStore
from .checks.fixing import steel_fixing_methods, steel_bolt_sizes, required_edge_distance
from .inputs import (
    DesignInputs,
    GeneticParameters,
    STANDARD,
    INVERTED,
    ANGLE_ORIENTATIONS,
    BRACKET_CENTRES,
    BRACKET_THICKNESSES,
    ANGLE_THICKNESSES,
    BOLT_DIAMETERS,
    CHANNEL_TYPES,
)
from .loading import characteristic_udl_from_masonry
from .materials import SYSTEM_DEFAULTS

logger = logging.getLogger(__name__)

FIXING_STEP = 5
HIGH_LOAD_CENTRES_THRESHOLD = 5.0
MAX_CENTRES_HIGH_LOAD = 500
THICK_BRACKET_LOAD_THRESHOLD = 4.0
THICK_BRACKET_DISTANCE = 50.0


def bracket_type_for(support_level: float) -> str:
    """Single threshold: at or above the slab top -> Inverted."""
    return INVERTED if support_level >= 0 else STANDARD


def valid_bracket_angle_combinations(support_level: float) -> List[Tuple[str, str]]:
    bracket_type = bracket_type_for(support_level)
    return [(bracket_type, orientation) for orientation in ANGLE_ORIENTATIONS]


def design_load(inputs: DesignInputs) -> float:
    """Characteristic load used by the pre-filters (kN/m)."""
    if inputs.characteristic_load is not None:
        return inputs.characteristic_load
    return characteristic_udl_from_masonry(
        inputs.masonry_density, inputs.masonry_thickness, inputs.masonry_height
    )


def valid_bracket_centres(load: float) -> List[int]:
    if load > HIGH_LOAD_CENTRES_THRESHOLD:
        return [c for c in BRACKET_CENTRES if c <= MAX_CENTRES_HIGH_LOAD]
    return list(BRACKET_CENTRES)


def requires_thick_bracket(load: float, support_level: float, slab_thickness: float) -> bool:
    far_above = support_level > THICK_BRACKET_DISTANCE
    far_below = support_level < -slab_thickness - THICK_BRACKET_DISTANCE
    return load > THICK_BRACKET_LOAD_THRESHOLD and (far_above or far_below)


def valid_bracket_thicknesses(load: float, support_level: float, slab_thickness: float) -> List[int]:
    if requires_thick_bracket(load, support_level, slab_thickness):
        return [4]
    return list(BRACKET_THICKNESSES)


def concrete_fixing_positions(slab_thickness: float,
                              custom_position: Optional[float] = None) -> List[float]:
    """
    Fixing depths below the slab top: 75 mm to slab - 75 mm in 5 mm steps.

    A custom position replaces the range and is not range-checked.
    """
    if custom_position is not None:
        return [float(custom_position)]
    start = SYSTEM_DEFAULTS.min_fixing_position
    stop = slab_thickness - SYSTEM_DEFAULTS.min_fixing_position
    return _stepped_range(start, stop)


def steel_fixing_positions(steel_height: float) -> List[float]:
    """Bolt positions on a steel member, keeping half the M16 edge distance each side."""
    edge = required_edge_distance("M16") / 2.0
    start = math.ceil(edge / FIXING_STEP) * FIXING_STEP
    return _stepped_range(start, steel_height - edge)


def _stepped_range(start: float, stop: float) -> List[float]:
    """start, start+5, ... up to stop inclusive; [start] when the range is empty."""
    if stop < start:
        return [float(start)]
    count = int(np.floor((stop - start) / FIXING_STEP)) + 1
    return [float(p) for p in start + FIXING_STEP * np.arange(count)]


def dim_d_values(slab_thickness: float, fixing_position: float,
                 custom_dim_d: Optional[float] = None) -> List[Optional[float]]:
    """
    Dim D options for an inverted bracket at one fixing position.

    Every 5 mm step from the minimum Dim D up to the slab envelope below the
    fixing (capped at the maximum). A slab too thin for even the minimum
    falls back to [None], leaving the resolver's natural value.
    """
    if custom_dim_d is not None:
        return [float(custom_dim_d)]
    top = min(SYSTEM_DEFAULTS.dim_d_max, slab_thickness - fixing_position)
    top = math.floor(top / FIXING_STEP) * FIXING_STEP
    if top < SYSTEM_DEFAULTS.dim_d_min:
        return [None]
    return _stepped_range(SYSTEM_DEFAULTS.dim_d_min, top)


def _channel_types(inputs: DesignInputs) -> List[str]:
    if inputs.allowed_channel_types:
        return [c for c in CHANNEL_TYPES if c in inputs.allowed_channel_types]
    return list(CHANNEL_TYPES)


def iter_candidates(inputs: DesignInputs, store: Optional[ChannelSpecStore] = None) -> Iterator[GeneticParameters]:
    """
    Yield candidates in a fixed order.

    Args:
        inputs: Design brief
        store: Channel table used to skip (channel, centres) pairs with no
            capacity row; None disables that filter
    """
    load = design_load(inputs)
    slab = inputs.effective_slab_thickness
    combos = valid_bracket_angle_combinations(inputs.support_level)
    centres_list = valid_bracket_centres(load)
    bracket_thicknesses = valid_bracket_thicknesses(load, inputs.support_level, slab)

    if inputs.is_steel_fixing:
        positions = steel_fixing_positions(slab)
        fixings = [
            (None, size, method)
            for size in steel_bolt_sizes(inputs.steel_bolt_size)
            for method in steel_fixing_methods(inputs.steel_section.section_type, inputs.steel_fixing_method)
        ]
    else:
        positions = concrete_fixing_positions(slab, inputs.custom_fixing_position)
        fixings = [(channel, None, None) for channel in _channel_types(inputs)]

    for bracket_type, orientation in combos:
        for centres in centres_list:
            for channel, steel_size, steel_method in fixings:
                if store is not None and channel is not None \
                        and store.lookup(channel, slab, centres) is None:
                    continue
                for bracket_t in bracket_thicknesses:
                    for angle_t in ANGLE_THICKNESSES:
                        for bolt in BOLT_DIAMETERS:
                            for position in positions:
                                if bracket_type == INVERTED:
                                    dims = dim_d_values(slab, position, inputs.custom_dim_d)
                                else:
                                    dims = [None]
                                for dim_d in dims:
                                    yield GeneticParameters(
                                        bracket_centres=centres,
                                        bracket_thickness=bracket_t,
                                        angle_thickness=angle_t,
                                        bolt_diameter=bolt,
                                        bracket_type=bracket_type,
                                        angle_orientation=orientation,
                                        fixing_position=position,
                                        dim_d=dim_d,
                                        channel_type=channel,
                                        steel_bolt_size=steel_size,
                                        steel_fixing_method=steel_method,
                                    )


def generate_candidates(inputs: DesignInputs, store: Optional[ChannelSpecStore] = None) -> List[GeneticParameters]:
    """All candidates as a list (see iter_candidates)."""
    candidates = list(iter_candidates(inputs, store))
    logger.info("Generated %d candidate designs", len(candidates))
    return candidates
