# masonry_support - Masonry support bracket/angle design search
"""
MASONRY-SUPPORT: Bracket and Angle Design Optimization
======================================================

This package provides:
- Deterministic verification of a bracket/angle masonry support
  (ten structural checks with an auditable trail of intermediate values)
- Exhaustive search for the lightest passing design, optionally in parallel
- Cast-in channel capacity lookup from the manufacturer CSV

ARCHITECTURE:
-------------
    inputs.py           Design brief and candidate parameters
    materials.py        Steel properties, partial factors, system defaults
    precision.py        12-decimal rounding used at every stage
    channels.py         Channel capacity table (CSV parse + lookup)
    loading.py          Characteristic/design UDL and shear per bracket
    angle.py            Angle section properties and bracket projection
    geometry.py         Bracket/angle geometry rules and angle extension
    checks/             The individual structural checks
    verification.py     Ordered check pipeline with trace observers
    weight.py           Steel mass per metre (the objective)
    layout.py           Bracket positions along the angle and run splits
    generator.py        Candidate space with cheap pre-filters
    optimizer.py        Stateless evaluation + min-by-mass selection
    config.py           Engine configuration (env overridable)
    logging_config.py   Plain or JSON log output
    cli.py              `masonry-support` command
"""

from .errors import (
    InputValidationError,
    InfeasibleGeometry,
    AngleExtensionError,
    NoFeasibleDesignError,
    LayoutError,
)
from .inputs import DesignInputs, GeneticParameters, SteelSection
from .materials import MaterialProperties, SafetyFactors, SystemDefaults, DEFAULT_MATERIAL, SYSTEM_DEFAULTS
from .channels import ChannelSpec, ChannelSpecStore, load_channel_store, parse_channel_csv
from .geometry import resolve_geometry, ResolvedGeometry
from .verification import verify_all, VerificationResult, TraceRecorder, LoggingTrace
from .weight import calculate_system_weight
from .layout import AnglePiece, RunLayout, bracket_positioning, optimize_run_layout
from .optimizer import run_optimization, evaluate_candidate, OptimizationResult, NoFeasibleDesign
from .config import EngineConfig, CONFIG, load_config

__version__ = "0.1.0"
