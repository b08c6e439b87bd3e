# masonry_support/inputs.py
"""
INPUTS: DESIGN BRIEF AND CANDIDATE PARAMETERS
==============================================

PURPOSE:
--------
Two immutable value types drive the whole engine:

- DesignInputs: the project brief (slab, cavity, support level, load, ...).
  Created once per optimization run and never mutated.
- GeneticParameters: the free variables of one candidate design (centres,
  thicknesses, bolt size, orientations, fixing position, channel).

ENGINEERING CONTEXT:
--------------------
All dimensions are mm, loads kN/m. Support level is measured from the
structural slab level (SSL): negative values are below the slab top, positive
values above it. The sign decides the bracket type (Standard below, Inverted
above).
"""

from dataclasses import dataclass, asdict
from typing import Optional, Tuple, List, Dict, Any

from .errors import InputValidationError


STANDARD = "Standard"
INVERTED = "Inverted"

BRACKET_TYPES = (STANDARD, INVERTED)
ANGLE_ORIENTATIONS = (STANDARD, INVERTED)

BRACKET_CENTRES = tuple(range(200, 601, 50))
BRACKET_THICKNESSES = (3, 4)
ANGLE_THICKNESSES = (3, 4, 5, 6, 8)
BOLT_DIAMETERS = (10, 12)
CHANNEL_TYPES = ("CPRO38", "CPRO50", "R-HPTIII-70", "R-HPTIII-90")

CONCRETE_FIXING = "concrete"
STEEL_FIXING = "steel"

STEEL_SECTION_TYPES = ("I-BEAM", "RHS", "SHS")
STEEL_BOLT_SIZES = ("M10", "M12", "M16")
BLIND_BOLT = "BLIND_BOLT"
SET_SCREW = "SET_SCREW"

# (low, high) legal ranges checked by DesignInputs.validate()
INPUT_RANGES = {
    "cavity": (50.0, 300.0),
    "slab_thickness": (100.0, 500.0),
    "characteristic_load": (0.0, 20.0),
    "notch_height": (0.0, 200.0),
    "custom_fixing_position": (75.0, 400.0),
    "custom_dim_d": (130.0, 450.0),
    "facade_thickness": (50.0, 300.0),
    "load_position": (0.1, 0.9),
    "front_offset": (-50.0, 100.0),
    "isolation_shim_thickness": (0.0, 20.0),
    "max_allowable_bracket_extension": (-1000.0, 500.0),
    "fixed_angle_length": (100.0, 1490.0),
    "run_length": (500.0, 250000.0),
}


def vertical_leg_for(angle_thickness: float) -> float:
    """Standard angle vertical leg: 75 mm for 8 mm angles, 60 mm otherwise."""
    return 75.0 if int(angle_thickness) == 8 else 60.0


@dataclass(frozen=True)
class SteelSection:
    """Supporting steel member for steel-frame fixing mode."""
    section_type: str          # I-BEAM, RHS or SHS
    effective_height: float    # mm, plays the role of the slab thickness
    size: str = ""

    @property
    def requires_blind_bolt(self) -> bool:
        return self.section_type in ("RHS", "SHS")


@dataclass(frozen=True)
class DesignInputs:
    """
    The design brief.

    Parameters:
    -----------
    slab_thickness : float
        Concrete slab depth (mm)
    cavity : float
        Cavity width between slab face and masonry (mm)
    support_level : float
        Angle bearing level relative to SSL (mm, negative = below slab top)
    characteristic_load : float, optional
        Characteristic UDL (kN/m). None -> derived from masonry density,
        thickness and height.
    facade_thickness, load_position : float, optional
        Eccentricity inputs. If either is None the eccentricity falls back to
        masonry_thickness / 3.
    custom_fixing_position : float, optional
        When set, the generator offers only this fixing position.
    enable_angle_extension / max_allowable_bracket_extension :
        Exclusion-zone limit for the bracket (mm relative to SSL).
    packer_thickness : float
        Packer under the angle-to-bracket bolt (0 = none).
    frame_fixing_type : str
        'concrete' (cast-in channel) or 'steel' (bolted to a steel member).
    fixed_angle_length : float, optional
        Length-limited angle (mm); None lays out a standard run.
    run_length : float, optional
        Total run to split into angle pieces (mm).
    """
    slab_thickness: float
    cavity: float
    support_level: float
    characteristic_load: Optional[float] = None
    masonry_thickness: float = 102.5
    masonry_density: float = 2000.0
    masonry_height: float = 3.0
    facade_thickness: Optional[float] = 102.5
    load_position: Optional[float] = 1.0 / 3.0
    front_offset: float = 12.0
    isolation_shim_thickness: float = 3.0
    notch_height: float = 0.0
    notch_depth: float = 0.0
    custom_fixing_position: Optional[float] = None
    custom_dim_d: Optional[float] = None
    enable_angle_extension: bool = False
    max_allowable_bracket_extension: Optional[float] = None
    packer_thickness: float = 10.0
    frame_fixing_type: str = CONCRETE_FIXING
    steel_section: Optional[SteelSection] = None
    steel_bolt_size: str = "all"
    steel_fixing_method: str = SET_SCREW
    allowed_channel_types: Optional[Tuple[str, ...]] = None
    fixed_angle_length: Optional[float] = None
    run_length: Optional[float] = None

    @property
    def is_steel_fixing(self) -> bool:
        return self.frame_fixing_type == STEEL_FIXING

    @property
    def effective_slab_thickness(self) -> float:
        """Slab thickness, or the steel section height in steel-fixing mode."""
        if self.is_steel_fixing and self.steel_section is not None:
            return self.steel_section.effective_height
        return self.slab_thickness

    @property
    def extension_limit(self) -> Optional[float]:
        """The exclusion-zone limit when angle extension is active, else None."""
        if self.enable_angle_extension and self.max_allowable_bracket_extension is not None:
            return self.max_allowable_bracket_extension
        return None

    def validation_errors(self) -> List[str]:
        """Collect every range or conditional-requirement problem."""
        errors = []
        for name, (low, high) in INPUT_RANGES.items():
            value = getattr(self, name)
            if value is None:
                continue
            if not low <= value <= high:
                errors.append(f"{name}={value} outside [{low}, {high}]")

        if self.characteristic_load is not None and self.characteristic_load <= 0:
            errors.append("characteristic_load must be positive")
        if self.characteristic_load is None and self.masonry_height <= 0:
            errors.append("masonry_height is required when characteristic_load is not given")
        if self.enable_angle_extension and self.max_allowable_bracket_extension is None:
            errors.append("max_allowable_bracket_extension is required when angle extension is enabled")
        if self.frame_fixing_type not in (CONCRETE_FIXING, STEEL_FIXING):
            errors.append(f"unknown frame_fixing_type {self.frame_fixing_type!r}")
        if self.is_steel_fixing:
            if self.steel_section is None:
                errors.append("steel_section is required for steel fixing")
            elif self.steel_section.section_type not in STEEL_SECTION_TYPES:
                errors.append(f"unknown steel section type {self.steel_section.section_type!r}")
            elif self.steel_section.requires_blind_bolt and self.steel_fixing_method == SET_SCREW:
                errors.append(f"{self.steel_section.section_type} sections require blind bolts")
            if self.steel_section is not None and self.steel_section.effective_height <= 0:
                errors.append("steel_section.effective_height must be positive")
        if self.allowed_channel_types is not None:
            unknown = [c for c in self.allowed_channel_types if c not in CHANNEL_TYPES]
            if unknown:
                errors.append(f"unknown channel types {unknown}")
        return errors

    def validate(self) -> "DesignInputs":
        """Raise InputValidationError listing every problem; return self if legal."""
        errors = self.validation_errors()
        if errors:
            raise InputValidationError("; ".join(errors))
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class GeneticParameters:
    """
    Free variables of one candidate design.

    Field order is also the deterministic tie-break order used by the
    optimizer when two candidates weigh the same.
    """
    bracket_centres: int
    bracket_thickness: int
    angle_thickness: int
    bolt_diameter: int
    bracket_type: str
    angle_orientation: str
    fixing_position: float
    dim_d: Optional[float] = None
    channel_type: Optional[str] = None
    steel_bolt_size: Optional[str] = None
    steel_fixing_method: Optional[str] = None

    @property
    def vertical_leg(self) -> float:
        return vertical_leg_for(self.angle_thickness)

    def sort_key(self) -> Tuple:
        """Total ordering over every field (None sorts first)."""
        return (
            self.bracket_centres,
            self.bracket_thickness,
            self.angle_thickness,
            self.bolt_diameter,
            BRACKET_TYPES.index(self.bracket_type),
            ANGLE_ORIENTATIONS.index(self.angle_orientation),
            self.fixing_position,
            -1.0 if self.dim_d is None else self.dim_d,
            self.channel_type or "",
            self.steel_bolt_size or "",
            self.steel_fixing_method or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
