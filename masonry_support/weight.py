# masonry_support/weight.py
"""
WEIGHT MODEL
============

The optimizer's objective: kilograms of stainless steel per metre run.

    bracket volume  = (2·projection + spine width)·height·t     (mm³, one bracket)
    angle volume    = (vertical + horizontal - T)·1000·T         (mm³ per metre)
    total           = angle + bracket × (1000 / centres)         (kg/m)

The spine width is the folded web of the bracket and depends on the gauge.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .errors import InputValidationError
from .inputs import vertical_leg_for
from .materials import MaterialProperties, DEFAULT_MATERIAL
from .precision import round12

BRACKET_SPINE_WIDTH = {3: 43.17, 4: 40.55}
DEFAULT_HORIZONTAL_LEG = 90.0


@dataclass(frozen=True)
class WeightBreakdown:
    bracket_weight: float             # kg per bracket
    brackets_per_metre: float
    bracket_weight_per_metre: float   # kg/m
    angle_weight: float               # kg/m
    total_weight: float               # kg/m
    bracket_volume: float             # mm³ per bracket
    angle_volume: float               # mm³ per metre
    total_volume: float               # mm³ per metre

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def calculate_system_weight(
    bracket_height: float,
    bracket_projection: float,
    bracket_thickness: int,
    bracket_centres: float,
    angle_thickness: float,
    vertical_leg: Optional[float] = None,
    horizontal_leg: Optional[float] = None,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> WeightBreakdown:
    """
    Steel mass per metre of a bracket/angle system.

    Parameters:
    -----------
    bracket_height, bracket_projection : float
        Resolved bracket dimensions (mm)
    bracket_thickness : int
        3 or 4 mm
    bracket_centres : float
        mm between brackets
    angle_thickness : float
        mm
    vertical_leg : float, optional
        Effective vertical leg (after any extension); defaults to the
        standard leg for the thickness
    horizontal_leg : float, optional
        Defaults to 90 mm

    Returns:
    --------
    WeightBreakdown
    """
    if bracket_thickness not in BRACKET_SPINE_WIDTH:
        raise InputValidationError(f"Invalid bracket thickness: {bracket_thickness}. Must be 3 or 4.")

    kg_per_mm3 = material.steel_density * 1e-9
    spine = BRACKET_SPINE_WIDTH[bracket_thickness]

    bracket_volume = round12((bracket_projection * 2.0 + spine) * bracket_height * bracket_thickness)
    brackets_per_metre = round12(1000.0 / bracket_centres)
    bracket_weight = round12(bracket_volume * kg_per_mm3)
    bracket_per_metre = round12(bracket_weight * brackets_per_metre)

    vertical = vertical_leg if vertical_leg is not None else vertical_leg_for(angle_thickness)
    horizontal = horizontal_leg if horizontal_leg is not None else DEFAULT_HORIZONTAL_LEG
    angle_volume = round12((vertical + horizontal - angle_thickness) * 1000.0 * angle_thickness)
    angle_weight = round12(angle_volume * kg_per_mm3)

    return WeightBreakdown(
        bracket_weight=bracket_weight,
        brackets_per_metre=brackets_per_metre,
        bracket_weight_per_metre=bracket_per_metre,
        angle_weight=angle_weight,
        total_weight=round12(angle_weight + bracket_per_metre),
        bracket_volume=bracket_volume,
        angle_volume=angle_volume,
        total_volume=round12(angle_volume + bracket_volume * brackets_per_metre),
    )
