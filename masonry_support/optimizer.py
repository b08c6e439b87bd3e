# masonry_support/optimizer.py
"""
OPTIMIZER / SELECTOR
====================

PURPOSE:
--------
Evaluate every candidate from the generator and pick the lightest design
that passes all checks, plus the next lightest as alternatives.

WORKFLOW:
---------
1. Generate candidates (generator.generate_candidates)
2. For each candidate, independently:
       resolve geometry -> verify -> weigh      (evaluate_candidate)
3. Reduce with a single min-by-mass fold
4. Annotate alternatives with their weight penalty and what differs
5. Lay out the optimum's brackets along the angle (layout.py)

WHY A STATELESS EVALUATION?
---------------------------
evaluate_candidate() depends only on its arguments, so it can be mapped
over a ProcessPoolExecutor without locks. Results come back in candidate
order (executor.map), and the fold orders by (total weight, parameter
sort key), so the selected design does not depend on scheduling or on the
number of workers.

FAILURES:
---------
- Infeasible geometry: the candidate is rejected with a reason, never raised.
- Failed checks: recorded on the evaluation, excluded from the fold.
- No passing candidate at all: run_optimization returns NoFeasibleDesign.
"""

import bisect
import logging
from collections import Counter
from concurrent.futures import Executor, ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import pandas as pd
from tqdm import tqdm

from .channels import ChannelSpecStore, load_channel_store
from .config import EngineConfig, CONFIG
from .errors import InfeasibleGeometry, LayoutError, NoFeasibleDesignError
from .generator import generate_candidates
from .geometry import ResolvedGeometry, resolve_geometry
from .inputs import DesignInputs, GeneticParameters
from .layout import AnglePiece, RunLayout, bracket_positioning, optimize_run_layout
from .materials import MaterialProperties, SystemDefaults, DEFAULT_MATERIAL, SYSTEM_DEFAULTS
from .precision import round12
from .verification import VerificationResult, Trace, verify_all
from .weight import WeightBreakdown, calculate_system_weight

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, Optional[float]], None]


@dataclass(frozen=True)
class CandidateEvaluation:
    """Outcome of evaluating one candidate."""
    params: GeneticParameters
    ok: bool
    reason: str = ""
    geometry: Optional[ResolvedGeometry] = None
    verification: Optional[VerificationResult] = None
    weight: Optional[WeightBreakdown] = None

    @property
    def total_weight(self) -> float:
        return self.weight.total_weight if self.weight is not None else float('inf')

    def sort_key(self) -> Tuple:
        return (self.total_weight,) + self.params.sort_key()

    def to_row(self) -> Dict:
        """Flat dict for a DataFrame row."""
        row = self.params.to_dict()
        row['ok'] = self.ok
        row['reason'] = self.reason
        row['total_weight'] = self.weight.total_weight if self.weight else None
        if self.geometry is not None:
            row['bracket_height'] = self.geometry.bracket_height
            row['rise_to_bolts'] = self.geometry.rise_to_bolts
            row['vertical_leg'] = self.geometry.vertical_leg
            row['angle_extension'] = self.geometry.to_dict()['angle_extension']
        if self.verification is not None:
            row.update(self.verification.summary())
        return row


@dataclass(frozen=True)
class Alternative:
    evaluation: CandidateEvaluation
    weight_delta_percent: float
    key_differences: Tuple[str, ...]


@dataclass(frozen=True)
class OptimizationResult:
    """The optimum plus ranked alternatives."""
    optimum: CandidateEvaluation
    alternatives: Tuple[Alternative, ...]
    channel_alternatives: Tuple[Alternative, ...]
    candidates_evaluated: int
    candidates_passing: int
    evaluations: Optional[pd.DataFrame] = field(default=None, compare=False, repr=False)
    layout: Optional[AnglePiece] = None
    run_layout: Optional[RunLayout] = None

    feasible = True

    def raise_for_status(self) -> "OptimizationResult":
        return self

    def to_frame(self) -> pd.DataFrame:
        """Optimum (rank 0) and alternatives as a table."""
        rows = [dict(self.optimum.to_row(), rank=0, weight_delta_percent=0.0, key_differences="")]
        for rank, alt in enumerate(self.alternatives, start=1):
            rows.append(dict(
                alt.evaluation.to_row(),
                rank=rank,
                weight_delta_percent=alt.weight_delta_percent,
                key_differences="; ".join(alt.key_differences),
            ))
        return pd.DataFrame(rows)


@dataclass(frozen=True)
class NoFeasibleDesign:
    """No candidate in the enumerated space passed every check."""
    candidates_evaluated: int
    rejections: Tuple[Tuple[str, int], ...]
    evaluations: Optional[pd.DataFrame] = field(default=None, compare=False, repr=False)

    feasible = False

    @property
    def message(self) -> str:
        if not self.candidates_evaluated:
            return "No candidate designs were generated for these inputs"
        top = ", ".join(f"{reason} ({count})" for reason, count in self.rejections[:5])
        return f"No feasible design among {self.candidates_evaluated} candidates; most common failures: {top}"

    def raise_for_status(self):
        raise NoFeasibleDesignError(self.message)


# ============================================================================
# PER-CANDIDATE EVALUATION
# ============================================================================

def fixing_edges(params: GeneticParameters, inputs: DesignInputs,
                 store: ChannelSpecStore) -> Tuple[float, float]:
    """(top, bottom) critical edge distances for the candidate's fixing."""
    if inputs.is_steel_fixing:
        height = inputs.effective_slab_thickness
        return params.fixing_position, height - params.fixing_position
    return store.edge_distances(params.channel_type, inputs.effective_slab_thickness, params.bracket_centres)


def evaluate_candidate(
    params: GeneticParameters,
    inputs: DesignInputs,
    store: ChannelSpecStore,
    material: MaterialProperties = DEFAULT_MATERIAL,
    defaults: SystemDefaults = SYSTEM_DEFAULTS,
    trace: Optional[Trace] = None,
) -> CandidateEvaluation:
    """
    Resolve, verify and weigh one candidate.

    Geometry rejections come back as ok=False with an "infeasible: ..."
    reason; failed checks as ok=False with "failed: <check names>".
    """
    try:
        geometry = resolve_geometry(params, inputs, fixing_edges(params, inputs, store), defaults)
    except InfeasibleGeometry as exc:
        return CandidateEvaluation(params=params, ok=False, reason=f"infeasible: {exc}")

    verification = verify_all(inputs, params, geometry, store, material, defaults, trace)
    weight = calculate_system_weight(
        geometry.bracket_height,
        geometry.bracket_projection,
        params.bracket_thickness,
        params.bracket_centres,
        params.angle_thickness,
        vertical_leg=geometry.vertical_leg,
        horizontal_leg=verification.angle_parameters['horizontal_leg'],
        material=material,
    )

    reason = "" if verification.passes else "failed: " + ", ".join(verification.failed_checks())
    return CandidateEvaluation(
        params=params,
        ok=verification.passes,
        reason=reason,
        geometry=geometry,
        verification=verification,
        weight=weight,
    )


@dataclass(frozen=True)
class CandidateEvaluator:
    """Picklable evaluate_candidate() with the shared arguments bound."""
    inputs: DesignInputs
    store: ChannelSpecStore
    material: MaterialProperties = DEFAULT_MATERIAL
    defaults: SystemDefaults = SYSTEM_DEFAULTS

    def __call__(self, params: GeneticParameters) -> CandidateEvaluation:
        return evaluate_candidate(params, self.inputs, self.store, self.material, self.defaults)


# ============================================================================
# SELECTION
# ============================================================================

class Leaderboard:
    """
    Min-by-mass fold that keeps the best `capacity` passing evaluations and
    the best evaluation per channel family.
    """

    def __init__(self, capacity: int):
        self.capacity = max(1, capacity)
        self._keys: List[Tuple] = []
        self._entries: List[CandidateEvaluation] = []
        self.best_by_family: Dict[str, CandidateEvaluation] = {}

    def add(self, evaluation: CandidateEvaluation) -> None:
        if not evaluation.ok:
            return
        key = evaluation.sort_key()
        pos = bisect.bisect_left(self._keys, key)
        if pos < self.capacity:
            self._keys.insert(pos, key)
            self._entries.insert(pos, evaluation)
            del self._keys[self.capacity:]
            del self._entries[self.capacity:]

        family = _fixing_family(evaluation.params)
        current = self.best_by_family.get(family)
        if current is None or key < current.sort_key():
            self.best_by_family[family] = evaluation

    @property
    def best(self) -> Optional[CandidateEvaluation]:
        return self._entries[0] if self._entries else None

    @property
    def ranked(self) -> List[CandidateEvaluation]:
        return list(self._entries)


def _fixing_family(params: GeneticParameters) -> str:
    if params.channel_type:
        return params.channel_type
    return f"{params.steel_fixing_method} {params.steel_bolt_size}"


def _fmt(value) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


def key_differences(best: CandidateEvaluation, other: CandidateEvaluation) -> Tuple[str, ...]:
    """Short human-readable list of what `other` changes relative to `best`."""
    a, b = best.params, other.params
    notes = []
    if b.bracket_type != a.bracket_type:
        notes.append(f"{b.bracket_type} bracket (vs {a.bracket_type})")
    if b.angle_orientation != a.angle_orientation:
        notes.append(f"{b.angle_orientation} angle (vs {a.angle_orientation})")
    if b.bracket_centres != a.bracket_centres:
        notes.append(f"{b.bracket_centres}mm centres (vs {a.bracket_centres}mm)")
    if b.bracket_thickness != a.bracket_thickness:
        notes.append(f"{b.bracket_thickness}mm bracket (vs {a.bracket_thickness}mm)")
    if b.angle_thickness != a.angle_thickness:
        notes.append(f"{b.angle_thickness}mm angle (vs {a.angle_thickness}mm)")
    if best.geometry and other.geometry and other.geometry.vertical_leg != best.geometry.vertical_leg:
        notes.append(f"{_fmt(other.geometry.vertical_leg)}mm vertical leg (vs {_fmt(best.geometry.vertical_leg)}mm)")
    if b.bolt_diameter != a.bolt_diameter:
        notes.append(f"M{b.bolt_diameter} bolts (vs M{a.bolt_diameter})")
    if b.channel_type != a.channel_type:
        notes.append(f"{b.channel_type} channel (vs {a.channel_type})")
    if b.steel_fixing_method != a.steel_fixing_method or b.steel_bolt_size != a.steel_bolt_size:
        notes.append(f"{b.steel_fixing_method} {b.steel_bolt_size} fixing "
                     f"(vs {a.steel_fixing_method} {a.steel_bolt_size})")
    if b.fixing_position != a.fixing_position:
        notes.append(f"fixing at {_fmt(b.fixing_position)}mm (vs {_fmt(a.fixing_position)}mm)")
    if b.dim_d != a.dim_d:
        notes.append(f"Dim D {_fmt(b.dim_d)}mm (vs {_fmt(a.dim_d)}mm)")
    return tuple(notes)


def make_alternative(best: CandidateEvaluation, other: CandidateEvaluation) -> Alternative:
    delta = (other.total_weight - best.total_weight) / best.total_weight * 100.0
    return Alternative(
        evaluation=other,
        weight_delta_percent=round12(delta),
        key_differences=key_differences(best, other),
    )


def optimum_layouts(centres: float, inputs: DesignInputs) -> Tuple[Optional[AnglePiece], Optional[RunLayout]]:
    """Bracket positions on one angle and, when a run length is given, the run split."""
    layout = run_layout = None
    try:
        layout = bracket_positioning(centres, inputs.fixed_angle_length)
    except LayoutError as exc:
        logger.warning("No bracket layout: %s", exc)
    if inputs.run_length:
        try:
            run_layout = optimize_run_layout(inputs.run_length, centres)
        except LayoutError as exc:
            logger.warning("No run layout: %s", exc)
    return layout, run_layout


def _rejection_family(reason: str) -> str:
    if reason.startswith("infeasible"):
        return "infeasible geometry"
    return reason


# ============================================================================
# PUBLIC ENTRY POINT
# ============================================================================

def run_optimization(
    inputs: DesignInputs,
    store: Optional[ChannelSpecStore] = None,
    material: MaterialProperties = DEFAULT_MATERIAL,
    defaults: SystemDefaults = SYSTEM_DEFAULTS,
    config: EngineConfig = CONFIG,
    executor: Optional[Executor] = None,
    progress: Optional[ProgressCallback] = None,
    collect_evaluations: bool = False,
    candidates: Optional[Sequence[GeneticParameters]] = None,
) -> Union[OptimizationResult, NoFeasibleDesign]:
    """
    Find the lightest passing design for a brief.

    Parameters:
    -----------
    inputs : DesignInputs
        Validated design brief
    store : ChannelSpecStore, optional
        Channel table; defaults to the packaged (or configured) CSV
    material, defaults :
        Engineering constants passed to every stage
    config : EngineConfig
        Worker count, chunk size, alternatives count, progress options
    executor : concurrent.futures.Executor, optional
        Use this executor instead of creating one
    progress : callable, optional
        progress(evaluated, total, best_mass_or_None), called periodically
    collect_evaluations : bool
        Attach a DataFrame with one row per candidate
    candidates : sequence, optional
        Evaluate these instead of the generated space

    Returns:
    --------
    OptimizationResult, or NoFeasibleDesign if nothing passes
    """
    if store is None:
        store = load_channel_store(config.channel_data_path)
    if candidates is None:
        candidates = generate_candidates(inputs, store)
    total = len(candidates)

    logger.info("Evaluating %d candidates (workers=%s)", total, config.max_workers)

    evaluator = CandidateEvaluator(inputs, store, material, defaults)
    every = config.progress_every or max(1, total // 100)

    leaderboard = Leaderboard(config.top_n_alternatives + 1)
    rejections: Counter = Counter()
    rows = [] if collect_evaluations else None
    passing = 0

    def consume(results: Iterable[CandidateEvaluation]) -> None:
        nonlocal passing
        if config.show_progress:
            results = tqdm(results, total=total, desc="Evaluating")
        for count, evaluation in enumerate(results, start=1):
            leaderboard.add(evaluation)
            if evaluation.ok:
                passing += 1
            else:
                rejections[_rejection_family(evaluation.reason)] += 1
                logger.debug("Rejected %s: %s", evaluation.params, evaluation.reason)
            if rows is not None:
                rows.append(evaluation.to_row())
            if progress is not None and (count % every == 0 or count == total):
                best = leaderboard.best
                progress(count, total, best.total_weight if best else None)

    if executor is not None:
        consume(executor.map(evaluator, candidates, chunksize=config.chunksize))
    elif config.max_workers and config.max_workers > 1:
        with ProcessPoolExecutor(max_workers=config.max_workers) as pool:
            consume(pool.map(evaluator, candidates, chunksize=config.chunksize))
    else:
        consume(map(evaluator, candidates))

    evaluations = pd.DataFrame(rows) if rows is not None else None
    best = leaderboard.best

    if best is None:
        result = NoFeasibleDesign(
            candidates_evaluated=total,
            rejections=tuple(sorted(rejections.items(), key=lambda item: (-item[1], item[0]))),
            evaluations=evaluations,
        )
        logger.warning(result.message)
        return result

    alternatives = tuple(make_alternative(best, other) for other in leaderboard.ranked[1:])
    best_family = _fixing_family(best.params)
    channel_alternatives = tuple(
        make_alternative(best, evaluation)
        for family, evaluation in sorted(leaderboard.best_by_family.items())
        if family != best_family
    )

    logger.info(
        "Optimum %.3f kg/m (%s, %dmm centres), %d of %d candidates pass",
        best.total_weight, _fixing_family(best.params), best.params.bracket_centres, passing, total,
    )

    layout, run_layout = optimum_layouts(best.params.bracket_centres, inputs)

    return OptimizationResult(
        optimum=best,
        alternatives=alternatives,
        channel_alternatives=channel_alternatives,
        candidates_evaluated=total,
        candidates_passing=passing,
        evaluations=evaluations,
        layout=layout,
        run_layout=run_layout,
    )
