# masonry_support/geometry.py
"""
GEOMETRY RESOLVER
=================

PURPOSE:
--------
Given one candidate (GeneticParameters) and the brief (DesignInputs), derive
the physical bracket: its height, how far the fixing sits above the bracket
heel (rise-to-bolts), Dim D for inverted brackets, how far it drops below the
slab soffit, and any angle extension needed to respect an exclusion zone.

THE FOUR SHAPES:
----------------
A bracket either hangs below its fixing (Standard) or stands up from it
(Inverted, used when the support level is above the slab top). The angle's
vertical leg either points down (Standard) or up (Inverted). The four
combinations are a closed decision table:

    (bracket, angle)        formula
    ---------------------   ----------------------------------------------
    Standard / Standard     |support| - fixing + Y
    Standard / Inverted     |support| - fixing + Y + vertical leg
    Inverted / Standard     above SSL + fixing + Dim D + vertical leg
    Inverted / Inverted     above SSL + fixing + Dim D

Y = 40 mm (bracket top to fixing). Each entry is a plain function; there is
no class hierarchy.

RISE-TO-BOLTS:
--------------
The fixing bolt sits in a 30 mm slot. Calculations use the worst case
(bottom of slot); the display value adds 15 mm (middle of slot). Both are
returned.

ANGLE EXTENSION:
----------------
An exclusion zone can cap how far the bracket may extend. When the natural
bracket breaks the limit, the bracket is shortened to the limit and the
angle's vertical leg is lengthened by the same amount, so the support level
does not move. Forces are unchanged; only geometry (and weight) change.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional, Tuple

from .angle import calculate_bracket_parameters
from .errors import InfeasibleGeometry, AngleExtensionError
from .inputs import DesignInputs, GeneticParameters, STANDARD, INVERTED
from .materials import SystemDefaults, SYSTEM_DEFAULTS
from .precision import round12

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AngleExtension:
    """Record of an exclusion-zone compensation."""
    extension_applied: bool
    original_bracket_height: float
    limited_bracket_height: float
    bracket_reduction: float
    original_angle_height: float
    extended_angle_height: float
    angle_extension: float
    max_extension_limit: float
    final_angle_orientation: str
    orientation_flipped: bool = False


@dataclass(frozen=True)
class ResolvedGeometry:
    """Physical bracket dimensions for one candidate (mm)."""
    bracket_type: str
    angle_orientation: str
    bracket_height: float
    bracket_projection: float
    design_cavity: float
    rise_to_bolts: float
    rise_to_bolts_display: float
    dim_d: Optional[float]
    drop_below_slab: float
    height_above_ssl: float
    height_below_ssl: float
    vertical_leg: float
    original_vertical_leg: float
    top_edge: float
    bottom_edge: float
    angle_extension: Optional[AngleExtension] = None

    @property
    def uses_extended_geometry(self) -> bool:
        return self.angle_extension is not None and self.angle_extension.extension_applied

    def to_dict(self) -> Dict:
        row = {k: v for k, v in self.__dict__.items() if k != 'angle_extension'}
        row['angle_extension'] = self.angle_extension.angle_extension if self.uses_extended_geometry else 0.0
        return row


@dataclass(frozen=True)
class _Context:
    support_level: float
    slab_thickness: float
    fixing_position: float
    angle_thickness: float
    vertical_leg: float
    top_edge: float
    bottom_edge: float
    notch_height: float
    dim_d: Optional[float]
    defaults: SystemDefaults


@dataclass(frozen=True)
class _Shape:
    height: float
    rise: float
    dim_d: Optional[float]
    drop: float
    above: float
    below: float


# ============================================================================
# STANDARD BRACKETS (hang below the fixing)
# ============================================================================

def _standard_rise(height: float, ctx: _Context, drop: float) -> float:
    """Worst-case rise-to-bolts of a standard bracket of the given height."""
    defaults = ctx.defaults
    rise = height - (defaults.bracket_top_to_fixing + defaults.slot_adjustment)

    # Bracket reaching below the slab: bolts must keep the bottom edge distance
    if abs(ctx.support_level) > ctx.slab_thickness - ctx.fixing_position:
        rise = min(rise, ctx.bottom_edge - defaults.slot_adjustment)

    rise -= max(0.0, ctx.notch_height - drop)
    if rise <= 0:
        raise InfeasibleGeometry(f"rise to bolts {rise:g}mm leaves no room for the fixing")
    return rise


def _standard_shape(ctx: _Context, leg_allowance: float) -> _Shape:
    defaults = ctx.defaults
    natural = abs(ctx.support_level) - ctx.fixing_position + defaults.bracket_top_to_fixing + leg_allowance
    height = max(natural, defaults.min_standard_bracket_height)
    drop = max(0.0, abs(ctx.support_level) - ctx.slab_thickness)
    return _Shape(
        height=height,
        rise=_standard_rise(height, ctx, drop),
        dim_d=None,
        drop=drop,
        above=0.0,
        below=height,
    )


def standard_bracket_standard_angle(ctx: _Context) -> _Shape:
    return _standard_shape(ctx, 0.0)


def standard_bracket_inverted_angle(ctx: _Context) -> _Shape:
    # The upturned leg sits on the bracket, so the bracket reaches one leg higher
    return _standard_shape(ctx, ctx.vertical_leg)


# ============================================================================
# INVERTED BRACKETS (stand up from the fixing)
# ============================================================================

def height_above_ssl(support_level: float, angle_thickness: float) -> float:
    """Bracket height above the slab top for an inverted bracket."""
    return support_level + (-7.0 if int(angle_thickness) == 8 else angle_thickness)


def _inverted_dim_d(ctx: _Context) -> float:
    """
    Dim D: bracket bottom to fixing. Natural value puts the heel at the
    soffit (never less than the minimum bearing below the fixing).
    """
    defaults = ctx.defaults
    clearance = ctx.slab_thickness - ctx.fixing_position

    if ctx.dim_d is not None:
        natural = ctx.dim_d
    else:
        rise = max(defaults.min_inverted_rise, clearance - defaults.slot_adjustment)
        natural = rise + defaults.slot_adjustment

    if natural > clearance:
        raise InfeasibleGeometry(
            f"Dim D {natural:g}mm exceeds slab envelope {clearance:g}mm below the fixing"
        )
    return min(max(natural, defaults.dim_d_min), defaults.dim_d_max)


def _inverted_shape(ctx: _Context, leg_allowance: float) -> _Shape:
    above = height_above_ssl(ctx.support_level, ctx.angle_thickness)
    dim_d = _inverted_dim_d(ctx)
    below = ctx.fixing_position + dim_d
    return _Shape(
        height=above + below + leg_allowance,
        rise=dim_d - ctx.defaults.slot_adjustment,
        dim_d=dim_d,
        drop=0.0,
        above=above,
        below=below,
    )


def inverted_bracket_standard_angle(ctx: _Context) -> _Shape:
    # The downturned leg hangs from the bracket top, so the bracket carries it
    return _inverted_shape(ctx, ctx.vertical_leg)


def inverted_bracket_inverted_angle(ctx: _Context) -> _Shape:
    return _inverted_shape(ctx, 0.0)


GEOMETRY_RULES: Dict[Tuple[str, str], Callable[[_Context], _Shape]] = {
    (STANDARD, STANDARD): standard_bracket_standard_angle,
    (STANDARD, INVERTED): standard_bracket_inverted_angle,
    (INVERTED, STANDARD): inverted_bracket_standard_angle,
    (INVERTED, INVERTED): inverted_bracket_inverted_angle,
}


# ============================================================================
# ANGLE EXTENSION
# ============================================================================

def _extension_record(shape: _Shape, limited: _Shape, ctx: _Context, limit: float,
                      bracket_type: str, angle_orientation: str) -> AngleExtension:
    reduction = shape.height - limited.height
    extended = ctx.vertical_leg + reduction
    if extended > ctx.defaults.max_angle_height:
        raise AngleExtensionError(
            f"extended angle height {extended:g}mm exceeds {ctx.defaults.max_angle_height:g}mm"
        )

    final_orientation = angle_orientation
    flipped = False
    if bracket_type == INVERTED and angle_orientation == STANDARD and reduction > 0:
        final_orientation = INVERTED
        flipped = True

    return AngleExtension(
        extension_applied=True,
        original_bracket_height=round12(shape.height),
        limited_bracket_height=round12(limited.height),
        bracket_reduction=round12(reduction),
        original_angle_height=round12(ctx.vertical_leg),
        extended_angle_height=round12(extended),
        angle_extension=round12(reduction),
        max_extension_limit=round12(limit),
        final_angle_orientation=final_orientation,
        orientation_flipped=flipped,
    )


def apply_angle_extension(shape: _Shape, ctx: _Context, limit: float, bracket_type: str,
                          angle_orientation: str) -> Tuple[_Shape, Optional[AngleExtension]]:
    """
    Cap the bracket at the exclusion-zone limit (mm relative to SSL).

    Returns the (possibly shortened) shape and the extension record, or the
    unchanged shape and None if the bracket already respects the limit.

    Raises:
        AngleExtensionError: the limited bracket is too short to carry the
            fixing, or the angle would exceed its maximum height
    """
    defaults = ctx.defaults

    if bracket_type == STANDARD:
        bracket_bottom = ctx.fixing_position + shape.height - defaults.bracket_top_to_fixing
        if bracket_bottom <= abs(limit):
            return shape, None
        limited_height = max(0.0, abs(limit) - ctx.fixing_position + defaults.bracket_top_to_fixing)
        if limited_height < defaults.min_standard_bracket_height:
            raise AngleExtensionError(
                f"limited bracket height {limited_height:g}mm is below the "
                f"{defaults.min_standard_bracket_height:g}mm minimum"
            )
        limited = replace(
            shape,
            height=limited_height,
            rise=_standard_rise(limited_height, ctx, shape.drop),
            below=limited_height,
        )
        return limited, _extension_record(shape, limited, ctx, limit, bracket_type, angle_orientation)

    if limit < 0:
        # The angle sits on top of an inverted bracket, so lengthening it cannot
        # pull the heel up out of a zone below the fixing.
        if ctx.fixing_position + shape.dim_d > abs(limit):
            raise AngleExtensionError(
                f"inverted bracket heel at {ctx.fixing_position + shape.dim_d:g}mm breaks "
                f"the {abs(limit):g}mm exclusion zone below SSL"
            )
        return shape, None

    if shape.above <= limit:
        return shape, None
    reduction = shape.above - limit
    limited = replace(shape, height=shape.height - reduction, above=limit)
    return limited, _extension_record(shape, limited, ctx, limit, bracket_type, angle_orientation)


# ============================================================================
# PUBLIC ENTRY POINT
# ============================================================================

def resolve_geometry(
    params: GeneticParameters,
    inputs: DesignInputs,
    edges: Tuple[float, float] = (75.0, 150.0),
    defaults: SystemDefaults = SYSTEM_DEFAULTS,
) -> ResolvedGeometry:
    """
    Derive the physical bracket for one candidate.

    Args:
        params: Candidate parameters
        inputs: Design brief
        edges: (top, bottom) critical edge distances of the fixing channel
        defaults: System geometry constants

    Returns:
        ResolvedGeometry

    Raises:
        InfeasibleGeometry: a hard geometric constraint is violated
    """
    rule = GEOMETRY_RULES.get((params.bracket_type, params.angle_orientation))
    if rule is None:
        raise InfeasibleGeometry(
            f"no geometry rule for {params.bracket_type} bracket / {params.angle_orientation} angle"
        )

    ctx = _Context(
        support_level=inputs.support_level,
        slab_thickness=inputs.effective_slab_thickness,
        fixing_position=params.fixing_position,
        angle_thickness=params.angle_thickness,
        vertical_leg=params.vertical_leg,
        top_edge=edges[0],
        bottom_edge=edges[1],
        notch_height=inputs.notch_height or 0.0,
        dim_d=params.dim_d,
        defaults=defaults,
    )

    shape = rule(ctx)

    extension = None
    limit = inputs.extension_limit
    if limit is not None:
        shape, extension = apply_angle_extension(
            shape, ctx, limit, params.bracket_type, params.angle_orientation
        )

    vertical_leg = extension.extended_angle_height if extension else params.vertical_leg
    bracket = calculate_bracket_parameters(inputs.cavity)

    return ResolvedGeometry(
        bracket_type=params.bracket_type,
        angle_orientation=params.angle_orientation,
        bracket_height=round12(shape.height),
        bracket_projection=bracket['bracket_projection'],
        design_cavity=bracket['design_cavity'],
        rise_to_bolts=round12(shape.rise),
        rise_to_bolts_display=round12(shape.rise + defaults.slot_adjustment),
        dim_d=None if shape.dim_d is None else round12(shape.dim_d),
        drop_below_slab=round12(shape.drop),
        height_above_ssl=round12(shape.above),
        height_below_ssl=round12(shape.below),
        vertical_leg=round12(vertical_leg),
        original_vertical_leg=round12(params.vertical_leg),
        top_edge=edges[0],
        bottom_edge=edges[1],
        angle_extension=extension,
    )
