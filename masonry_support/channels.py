# masonry_support/channels.py
"""
CHANNEL SPECIFICATION STORE
===========================

PURPOSE:
--------
Cast-in anchor channels have tabulated design resistances that depend on the
slab thickness and on the bracket centres (how many brackets share a length
of channel). This module loads that table once and answers

    lookup(channel_type, slab_thickness, bracket_centres) -> ChannelSpec | None

for the fixing check.

FALLBACK RULES:
---------------
The table is sparse (three slab depths, 50 mm centre steps, and only a few
rows for the R-HPTIII post-fix products), so a lookup resolves in order:

1. Exact (type, slab, centres) row.
2. Slab: the nearest tabulated slab >= the requested one. A slab thicker than
   every row uses the thickest row (a deeper slab is never weaker).
3. Centres within that slab: exact, else the nearest tabulated value >= the
   request. Wider centres load each channel more, so a row for smaller
   centres would overstate the capacity; if none exists, the lookup misses.
4. Unknown channel family -> None.

A miss is returned as None, never raised. The fixing check turns it into a
failing result with a note naming the missing key.

DATA FORMAT:
------------
The packaged CSV is the manufacturer's capacity sheet: a header row whose
first cell names the product, followed by data rows

    ,slab,top edge,bottom edge,spacing,Nd kN,Nd uf %,Vd kN,Vd uf %,Comb uf %

where empty slab/edge cells inherit the previous row's value.
"""

import csv
import io
import logging
from bisect import bisect_left
from dataclasses import dataclass, asdict
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, NamedTuple, Iterable

import pandas as pd


logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_DATA = Path(__file__).parent / "data" / "channel_specs.csv"

# Edge distances used when no channel row is available
DEFAULT_TOP_EDGE = 75.0
DEFAULT_BOTTOM_EDGE = 150.0


@dataclass(frozen=True)
class ChannelSpec:
    """One row of the channel capacity table (forces in kN, distances in mm)."""
    channel_type: str
    slab_thickness: float
    bracket_centres: float
    top_edge: float
    bottom_edge: float
    tension: float
    shear: float
    tension_uf: Optional[float] = None
    shear_uf: Optional[float] = None
    combined_uf: Optional[float] = None

    @property
    def id(self) -> str:
        return f"{self.channel_type}_{self.slab_thickness:g}_{self.bracket_centres:g}"


class ParseResult(NamedTuple):
    specs: List[ChannelSpec]
    errors: List[str]
    warnings: List[str]


def channel_type_from_description(description: str) -> Optional[str]:
    """Map a product description cell to a channel type, or None if it is not a header."""
    for name in ("CPRO38", "CPRO50", "CPRO52"):
        if name in description:
            return name
    if "HPTIII" in description:
        if "70mm" in description:
            return "R-HPTIII-70"
        if "90mm" in description:
            return "R-HPTIII-90"
    return None


def _number(cell: str) -> Optional[float]:
    cell = cell.strip().replace("%", "")
    if not cell:
        return None
    try:
        return float(cell)
    except ValueError:
        return None


def parse_channel_csv(text: str) -> ParseResult:
    """
    Parse the manufacturer's capacity sheet.

    Bad rows never abort the parse: structural problems go to `warnings`,
    rows that produce an impossible spec go to `errors`, and every valid
    row becomes a ChannelSpec.

    Parameters:
    -----------
    text : str
        Raw CSV content

    Returns:
    --------
    ParseResult
        (specs, errors, warnings)
    """
    specs: List[ChannelSpec] = []
    errors: List[str] = []
    warnings: List[str] = []

    channel_type = None
    slab = top = bottom = None

    for line_no, cells in enumerate(csv.reader(io.StringIO(text)), start=1):
        cells = [c.strip() for c in cells]
        if not any(cells):
            continue
        if len(cells) < 10:
            warnings.append(f"Line {line_no}: Insufficient columns ({len(cells)}/10), skipping")
            continue

        description = cells[0]
        if description:
            found = channel_type_from_description(description)
            if found:
                channel_type = found
                slab = top = bottom = None
                continue

        if channel_type is None:
            warnings.append(f"Line {line_no}: No valid channel type found, skipping data row")
            continue

        if cells[1]:
            slab = _number(cells[1])
        if not slab:
            warnings.append(f"Line {line_no}: No valid slab thickness found, skipping")
            continue

        if cells[2]:
            top = _number(cells[2])
        if cells[3]:
            bottom = _number(cells[3])
        if not top or not bottom:
            warnings.append(f"Line {line_no}: Missing edge distances, skipping")
            continue

        spacing = _number(cells[4])
        if not spacing:
            warnings.append(f"Line {line_no}: Invalid spacing value {cells[4]!r}, skipping")
            continue

        tension = _number(cells[5])
        shear = _number(cells[7])
        if not tension or not shear:
            warnings.append(
                f"Line {line_no}: Invalid force values (tension: {cells[5]!r}, shear: {cells[7]!r}), skipping"
            )
            continue
        if tension < 0 or shear < 0:
            errors.append(f"Line {line_no}: Negative capacity for {channel_type}")
            continue

        specs.append(ChannelSpec(
            channel_type=channel_type,
            slab_thickness=slab,
            bracket_centres=spacing,
            top_edge=top,
            bottom_edge=bottom,
            tension=tension,
            shear=shear,
            tension_uf=_number(cells[6]),
            shear_uf=_number(cells[8]),
            combined_uf=_number(cells[9]),
        ))

    return ParseResult(specs, errors, warnings)


class ChannelSpecStore:
    """
    Read-only index over ChannelSpec rows.

    Instances are immutable after construction and safe to share between
    worker processes (they pickle as a plain list of frozen dataclasses).
    """

    def __init__(self, specs: Iterable[ChannelSpec]):
        self._specs: Tuple[ChannelSpec, ...] = tuple(specs)
        self._index: Dict[Tuple[str, float, float], ChannelSpec] = {}
        self._slabs: Dict[str, List[float]] = {}
        self._centres: Dict[Tuple[str, float], List[float]] = {}

        for spec in self._specs:
            key = (spec.channel_type, spec.slab_thickness, spec.bracket_centres)
            if key in self._index:
                logger.warning("Duplicate channel row %s, keeping the first", spec.id)
                continue
            self._index[key] = spec
            self._slabs.setdefault(spec.channel_type, []).append(spec.slab_thickness)
            self._centres.setdefault((spec.channel_type, spec.slab_thickness), []).append(spec.bracket_centres)

        for values in list(self._slabs.values()) + list(self._centres.values()):
            values[:] = sorted(set(values))

    @classmethod
    def from_csv(cls, path) -> "ChannelSpecStore":
        """Load a capacity sheet from disk, logging parser warnings and errors."""
        text = Path(path).read_text(encoding="utf-8")
        result = parse_channel_csv(text)
        for message in result.warnings:
            logger.warning("%s: %s", path, message)
        for message in result.errors:
            logger.error("%s: %s", path, message)
        logger.info("Loaded %d channel specs from %s", len(result.specs), path)
        return cls(result.specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self):
        return iter(self._specs)

    @property
    def channel_types(self) -> List[str]:
        return sorted(self._slabs)

    def lookup(self, channel_type: str, slab_thickness: float,
               bracket_centres: float) -> Optional[ChannelSpec]:
        """
        Resolve a channel row with the fallback rules in the module docstring.

        Returns None when the family is unknown or no row with centres at or
        above the request exists for the resolved slab.
        """
        exact = self._index.get((channel_type, slab_thickness, bracket_centres))
        if exact is not None:
            return exact

        slabs = self._slabs.get(channel_type)
        if not slabs:
            return None
        # Round the slab UP to the next tabulated depth (240 -> 250, not 225);
        # only a slab beyond the table falls back down to the thickest row
        pos = bisect_left(slabs, slab_thickness)
        slab = slabs[pos] if pos < len(slabs) else slabs[-1]

        centres = self._centres[(channel_type, slab)]
        pos = bisect_left(centres, bracket_centres)
        if pos == len(centres):
            return None
        return self._index[(channel_type, slab, centres[pos])]

    def edge_distances(self, channel_type: Optional[str], slab_thickness: float,
                       bracket_centres: float) -> Tuple[float, float]:
        """(top, bottom) critical edge distances, with defaults when no row resolves."""
        spec = self.lookup(channel_type, slab_thickness, bracket_centres) if channel_type else None
        if spec is None:
            return DEFAULT_TOP_EDGE, DEFAULT_BOTTOM_EDGE
        return spec.top_edge, spec.bottom_edge

    def to_frame(self) -> pd.DataFrame:
        """The whole table as a DataFrame, one row per spec."""
        rows = []
        for spec in self._specs:
            row = asdict(spec)
            row["id"] = spec.id
            rows.append(row)
        return pd.DataFrame(rows)


@lru_cache(maxsize=None)
def load_channel_store(path: Optional[str] = None) -> ChannelSpecStore:
    """Load (once per process and path) the packaged or a custom capacity table."""
    return ChannelSpecStore.from_csv(path or DEFAULT_CHANNEL_DATA)


def missing_channel_note(channel_type: Optional[str], slab_thickness: float,
                         bracket_centres: float) -> str:
    return (
        f"No channel data for {channel_type} at slab {slab_thickness:g}mm, "
        f"centres {bracket_centres:g}mm"
    )
