# masonry_support/layout.py
"""
ANGLE RUN LAYOUT: BRACKET POSITIONS ALONG THE ANGLE
===================================================

PURPOSE:
--------
Once the optimizer has fixed the bracket centres, the angle still has to be
cut into manufacturable pieces and each bracket placed on a piece. This
module answers three questions:

1. Standard run: which angle lengths fit the centres exactly?
       L = k·C - gap       (k brackets, C centres, 10 mm gap, L <= 1490 mm)
   The first bracket sits C/2 - gap/2 from the end, so spacing is kept
   across the joint between two angles.

2. Length-limited run: an angle of a given length Z, centres at most C.
       N = ceil(Z / C), then grow N until the slot-snapped spacing
       S = ceil(Z / N / 50)·50 fits within C; overhang e = (Z - (N-1)·S) / 2

3. Whole run: split a long run into standard pieces plus make-up pieces,
   scoring each split by bracket count, then average spacing, then the
   number of distinct piece lengths.

    |<-e->|<---S--->|<---S--->|<-e->|  gap  |<-e->| ...
    [=====●=========●=========●=====]       [=====●=====
"""

import logging
import math
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Tuple

import pandas as pd

from .errors import LayoutError
from .precision import round12

logger = logging.getLogger(__name__)

MAX_ANGLE_LENGTH = 1490.0    # 1.5 m sheet less the gap
ANGLE_GAP = 10.0             # expansion gap between angles
LENGTH_INCREMENT = 5.0
SLOT_PITCH = 50.0
MIN_EDGE_DISTANCE = 35.0     # angle end to bracket
MAX_BRACKETS_PER_PIECE = 100


@dataclass(frozen=True)
class AnglePiece:
    """One length of angle and the brackets on it (positions from the left end)."""
    angle_length: float
    bracket_count: int
    spacing: float
    start_offset: float
    positions: Tuple[float, ...]
    is_standard_run: bool

    @property
    def end_offset(self) -> float:
        return round12(self.angle_length - self.positions[-1])

    def to_dict(self) -> Dict:
        row = asdict(self)
        row['positions'] = list(self.positions)
        return row


def _positions(start: float, spacing: float, count: int) -> Tuple[float, ...]:
    return tuple(round12(start + i * spacing) for i in range(count))


# ============================================================================
# SINGLE ANGLE
# ============================================================================

def standard_run_options(centres: float, max_length: float = MAX_ANGLE_LENGTH,
                         gap: float = ANGLE_GAP,
                         increment: float = LENGTH_INCREMENT) -> List[AnglePiece]:
    """
    Every angle length k·C - gap up to max_length, longest first.

    500 mm centres -> 1490, 990, 490; 350 mm centres -> 1390, 1040, 690, 340.
    """
    if centres <= gap:
        raise LayoutError(f"centres {centres:g}mm must exceed the {gap:g}mm gap")
    if centres % increment:
        logger.warning("Centres %gmm are not a multiple of %gmm", centres, increment)

    options = []
    start = centres / 2.0 - gap / 2.0
    for count in range(int((max_length + gap) // centres), 0, -1):
        length = count * centres - gap
        length = math.floor(length / increment + 0.5) * increment
        if length <= 0 or length > max_length:
            continue
        options.append(AnglePiece(
            angle_length=round12(length),
            bracket_count=count,
            spacing=round12(centres),
            start_offset=round12(start),
            positions=_positions(start, centres, count),
            is_standard_run=True,
        ))
    return options


def non_standard_run_options(length: float, max_centres: float,
                             slot_step: float = SLOT_PITCH) -> AnglePiece:
    """
    Fewest brackets on an angle of fixed length with slot-snapped spacing.

    1200 mm at <= 500 centres -> 3 brackets at 400, overhang 200.
    """
    if length <= 0:
        raise LayoutError("angle length must be positive")
    if max_centres < slot_step:
        raise LayoutError(f"centres {max_centres:g}mm are below the {slot_step:g}mm slot pitch")

    count = math.ceil(length / max_centres)
    while True:
        spacing = math.ceil(length / count / slot_step) * slot_step
        if spacing <= max_centres:
            break
        count += 1

    overhang = (length - (count - 1) * spacing) / 2.0
    return AnglePiece(
        angle_length=round12(length),
        bracket_count=count,
        spacing=round12(spacing),
        start_offset=round12(overhang),
        positions=_positions(overhang, spacing, count),
        is_standard_run=False,
    )


def bracket_positioning(centres: float, fixed_length: Optional[float] = None,
                        max_angle_length: float = MAX_ANGLE_LENGTH) -> AnglePiece:
    """
    Bracket layout for the optimum: the longest standard run, or the
    slot-snapped layout of a length-limited angle.
    """
    if fixed_length is None:
        options = standard_run_options(centres, max_angle_length)
        if not options:
            raise LayoutError(f"no standard run fits {centres:g}mm centres")
        return options[0]
    return non_standard_run_options(fixed_length, centres)


# ============================================================================
# WHOLE RUN
# ============================================================================

@dataclass(frozen=True)
class RunLayout:
    """A run split into angle pieces, with a gap at each end and between pieces."""
    pieces: Tuple[AnglePiece, ...]
    gap: float = ANGLE_GAP

    @property
    def total_length(self) -> float:
        return round12(sum(p.angle_length for p in self.pieces) + (len(self.pieces) + 1) * self.gap)

    @property
    def total_brackets(self) -> int:
        return sum(p.bracket_count for p in self.pieces)

    @property
    def average_spacing(self) -> float:
        intervals = sum(p.bracket_count - 1 for p in self.pieces)
        if not intervals:
            return 0.0
        return round12(sum(p.spacing * (p.bracket_count - 1) for p in self.pieces) / intervals)

    @property
    def unique_piece_lengths(self) -> int:
        return len({p.angle_length for p in self.pieces})

    @property
    def score(self) -> float:
        """Lower is better: brackets first, then wider spacing, then fewer lengths."""
        return round12(self.total_brackets * 1000 + (600 - self.average_spacing) * 10
                       + self.unique_piece_lengths)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([
            dict(piece=i + 1, **{k: v for k, v in p.to_dict().items() if k != 'positions'},
                 end_offset=p.end_offset)
            for i, p in enumerate(self.pieces)
        ])


def standard_piece(length: float, centres: float, gap: float = ANGLE_GAP) -> AnglePiece:
    count = int(round((length + gap) / centres))
    start = centres / 2.0 - gap / 2.0
    return AnglePiece(
        angle_length=round12(length),
        bracket_count=count,
        spacing=round12(centres),
        start_offset=round12(start),
        positions=_positions(start, centres, count),
        is_standard_run=True,
    )


def make_up_piece(length: float, centres: float, min_edge: float = MIN_EDGE_DISTANCE,
                  max_edge: Optional[float] = None) -> AnglePiece:
    """
    Make-up angle with at least two brackets and both overhangs inside
    [min_edge, max_edge]. Tries the full centres first, then slot-snapped
    spacing, adding brackets until one fits.
    """
    if max_edge is None:
        max_edge = 0.5 * centres

    count = max(2, math.ceil(length / centres))
    while count <= MAX_BRACKETS_PER_PIECE:
        for spacing in (centres, math.ceil(length / count / SLOT_PITCH) * SLOT_PITCH):
            if spacing > centres:
                continue
            overhang = (length - (count - 1) * spacing) / 2.0
            if min_edge <= overhang <= max_edge:
                return AnglePiece(
                    angle_length=round12(length),
                    bracket_count=count,
                    spacing=round12(spacing),
                    start_offset=round12(overhang),
                    positions=_positions(overhang, spacing, count),
                    is_standard_run=False,
                )
        count += 1
    raise LayoutError(f"no bracket arrangement fits a {length:g}mm make-up piece")


def _split_options(run_length: float, standard: List[float], gap: float,
                   max_length: float, increment: float) -> List[Tuple[float, ...]]:
    """Candidate piece-length lists: longest standard pieces plus make-up."""
    longest = standard[0]
    available = run_length - gap
    full = int(available // (longest + gap))
    remainder = round12(available - full * (longest + gap))
    head = (longest,) * full

    def finish(rest: float) -> Optional[Tuple[float, ...]]:
        if rest == 0:
            return ()
        if rest - gap > 0:
            return (round12(rest - gap),)
        return None

    splits = []
    tail = finish(remainder)
    if tail is not None:
        splits.append(head + tail)

    for shorter in standard[1:]:
        if shorter + gap <= remainder:
            tail = finish(round12(remainder - shorter - gap))
            if tail is not None:
                splits.append(head + (shorter,) + tail)

    # Two equal make-up pieces in place of the last full piece and the remainder
    if full >= 1 and remainder:
        combined = remainder + longest + gap - 2 * gap
        first = math.floor(combined / 2 / increment) * increment
        second = round12(combined - first)
        if 0 < first and second <= max_length:
            splits.append(head[:-1] + (float(first), second))

    return list(dict.fromkeys(splits))


def run_layout_options(run_length: float, centres: float,
                       max_angle_length: float = MAX_ANGLE_LENGTH, gap: float = ANGLE_GAP,
                       min_edge: float = MIN_EDGE_DISTANCE,
                       max_edge: Optional[float] = None) -> List[RunLayout]:
    """Every workable split of the run, best score first."""
    standard = [p.angle_length for p in standard_run_options(centres, max_angle_length, gap)]
    if not standard:
        raise LayoutError(f"no standard run fits {centres:g}mm centres")

    layouts = []
    for lengths in _split_options(run_length, standard, gap, max_angle_length, LENGTH_INCREMENT):
        try:
            pieces = tuple(
                standard_piece(length, centres, gap) if length in standard
                else make_up_piece(length, centres, min_edge, max_edge)
                for length in lengths
            )
        except LayoutError as exc:
            logger.debug("Split %s rejected: %s", lengths, exc)
            continue
        layouts.append(RunLayout(pieces=pieces, gap=gap))

    layouts.sort(key=lambda layout: (layout.score, tuple(p.angle_length for p in layout.pieces)))
    return layouts


def optimize_run_layout(run_length: float, centres: float, **kwargs) -> RunLayout:
    """Best-scoring split of a run of the given length (mm)."""
    layouts = run_layout_options(run_length, centres, **kwargs)
    if not layouts:
        raise LayoutError(f"no valid split for a {run_length:g}mm run at {centres:g}mm centres")
    return layouts[0]
