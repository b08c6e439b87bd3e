# masonry_support/errors.py
"""
Error taxonomy.

Only programming errors at the engine boundary escape as exceptions.
Candidate-level problems (infeasible geometry) are raised inside the
Geometry Resolver and converted into rejection reasons by the optimizer;
failed checks and missing channel data are recorded in result dicts.
"""


class InputValidationError(ValueError):
    """DesignInputs (or a helper argument) is outside its legal domain."""


class InfeasibleGeometry(ValueError):
    """A candidate's derived geometry violates a hard constraint."""


class AngleExtensionError(InfeasibleGeometry):
    """Angle extension cannot compensate for the exclusion-zone limit."""


class NoFeasibleDesignError(RuntimeError):
    """Raised on request when an optimization produced no passing candidate."""


class LayoutError(ValueError):
    """No bracket arrangement fits the requested angle or run length."""
