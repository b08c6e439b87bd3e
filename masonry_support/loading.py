# masonry_support/loading.py
"""
LOADING: FROM MASONRY WEIGHT TO BRACKET SHEAR
==============================================

The load path is one line of arithmetic, but every check downstream starts
from these two numbers:

    design UDL   = characteristic UDL x load factor          (kN/m)
    shear force  = design UDL x bracket centres / 1000       (kN per bracket)

If the characteristic UDL is not given it is derived from the masonry:

    area load    = density x g x height            (N/mm²)
    UDL          = area load x leaf thickness      (N/mm = kN/m)
"""

from dataclasses import dataclass
from typing import Optional

from .errors import InputValidationError
from .materials import MaterialProperties, DEFAULT_MATERIAL, SYSTEM_DEFAULTS
from .precision import round12

MIN_CENTRES = 200
MAX_CENTRES = 600


@dataclass(frozen=True)
class LoadingResult:
    characteristic_udl: float  # kN/m
    design_udl: float          # kN/m
    shear_force: float         # kN per bracket


def characteristic_udl_from_masonry(
    density: float,
    thickness: float,
    height: float,
    gravity: float = SYSTEM_DEFAULTS.gravity,
) -> float:
    """
    Characteristic line load from the supported masonry.

    Args:
        density: Masonry density (kg/m³)
        thickness: Leaf thickness (mm)
        height: Supported height (m)

    Returns:
        UDL in kN/m
    """
    # kg/m³ -> N/mm³
    unit_weight = round12(density * gravity * 1e-9)
    area_load = round12(unit_weight * height * 1000.0)
    return round12(area_load * thickness)


@dataclass(frozen=True)
class BrickDensity:
    weight_per_brick_dry: float        # kg
    weight_per_brick_saturated: float  # kg
    mortar_weight_per_brick: float     # kg
    combined_weight: float             # kg
    density_kg_m3: float               # brick + mortar, feeds DesignInputs.masonry_density
    density_kn_m3: float
    area_load: float                   # kN/m² per brick height of wall


def brick_density(
    weight_per_pack: float,
    bricks_per_pack: int,
    mortar_density: float,
    length: float,
    width: float,
    height: float,
    gravity: float = SYSTEM_DEFAULTS.gravity,
) -> BrickDensity:
    """
    Masonry density from a brick pack and its mortar joints.

    The brick is taken saturated (dry weight x 1.15) and carries a 10 mm bed
    and perp joint of mortar. Dimensions are the brick's, in mm.
    """
    if bricks_per_pack <= 0:
        raise InputValidationError("bricks_per_pack must be positive")
    if min(length, width, height) <= 0:
        raise InputValidationError("brick dimensions must be positive")

    length_m, width_m, height_m = length / 1000.0, width / 1000.0, height / 1000.0

    dry = weight_per_pack / bricks_per_pack
    saturated = dry * 1.15
    mortar_volume = length_m * 0.01 * height_m + width_m * 0.01 * height_m
    mortar = mortar_density * mortar_volume
    combined = saturated + mortar

    density = combined / (length_m * width_m * height_m)
    density_kn = density * gravity / 1000.0

    return BrickDensity(
        weight_per_brick_dry=round12(dry),
        weight_per_brick_saturated=round12(saturated),
        mortar_weight_per_brick=round12(mortar),
        combined_weight=round12(combined),
        density_kg_m3=round12(density),
        density_kn_m3=round12(density_kn),
        area_load=round12(density_kn * height_m),
    )


def calculate_loading(
    bracket_centres: float,
    characteristic_load: Optional[float] = None,
    masonry_density: Optional[float] = None,
    masonry_thickness: Optional[float] = None,
    masonry_height: Optional[float] = None,
    material: MaterialProperties = DEFAULT_MATERIAL,
) -> LoadingResult:
    """
    Design UDL and per-bracket shear force.

    Raises:
        InputValidationError: centres outside 200..600 mm, or no usable load
    """
    if not MIN_CENTRES <= bracket_centres <= MAX_CENTRES:
        raise InputValidationError(
            f"Bracket centres must be between {MIN_CENTRES} and {MAX_CENTRES} mm, got {bracket_centres}"
        )

    if characteristic_load is not None:
        char_udl = characteristic_load
    elif None not in (masonry_density, masonry_thickness, masonry_height):
        char_udl = characteristic_udl_from_masonry(masonry_density, masonry_thickness, masonry_height)
    else:
        raise InputValidationError("Either characteristic_load or masonry density/thickness/height is required")

    if char_udl <= 0:
        raise InputValidationError(f"Characteristic load must be positive, got {char_udl}")

    design_udl = round12(char_udl * material.factors.load_factor)
    shear_force = round12(design_udl * bracket_centres / 1000.0)

    return LoadingResult(
        characteristic_udl=round12(char_udl),
        design_udl=design_udl,
        shear_force=shear_force,
    )


def loading_for(inputs, bracket_centres: float,
                material: MaterialProperties = DEFAULT_MATERIAL) -> LoadingResult:
    """calculate_loading() fed from a DesignInputs value."""
    return calculate_loading(
        bracket_centres,
        characteristic_load=inputs.characteristic_load,
        masonry_density=inputs.masonry_density,
        masonry_thickness=inputs.masonry_thickness,
        masonry_height=inputs.masonry_height,
        material=material,
    )
