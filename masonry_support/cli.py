# masonry_support/cli.py
"""
MASONRY SUPPORT DESIGN SEARCH
=============================

Command line front end for the optimizer:

1. Parse the design brief from arguments
2. Enumerate and evaluate every candidate
3. Print the optimum and the ranked alternatives
4. Optionally write the full evaluation log to CSV

EXAMPLE USAGE:
--------------
    masonry-support --slab 225 --cavity 200 --support-level -200 --load 14
    masonry-support --slab 250 --cavity 150 --support-level 50 --load 6 --workers 4 --csv results.csv
"""

import argparse
import logging
import sys
from dataclasses import replace

import pandas as pd

from .channels import load_channel_store
from .config import load_config
from .errors import InputValidationError
from .inputs import DesignInputs, SteelSection, CHANNEL_TYPES, STEEL_SECTION_TYPES
from .logging_config import setup_logging
from .optimizer import run_optimization

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="masonry-support",
        description="Find the lightest bracket/angle masonry support that passes every check",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  masonry-support --slab 225 --cavity 200 --support-level -200 --load 14
  masonry-support --slab 250 --cavity 150 --support-level 50 --load 6 --workers 4
        """,
    )
    brief = parser.add_argument_group("design brief")
    brief.add_argument('--slab', type=float, required=True, help='Slab thickness (mm)')
    brief.add_argument('--cavity', type=float, required=True, help='Cavity width (mm)')
    brief.add_argument('--support-level', type=float, required=True,
                       help='Support level relative to slab top (mm, negative = below)')
    brief.add_argument('--load', type=float, default=None,
                       help='Characteristic load (kN/m); omit to derive from masonry')
    brief.add_argument('--masonry-thickness', type=float, default=102.5)
    brief.add_argument('--masonry-density', type=float, default=2000.0, help='kg/m3')
    brief.add_argument('--masonry-height', type=float, default=3.0, help='m')
    brief.add_argument('--facade-thickness', type=float, default=102.5)
    brief.add_argument('--load-position', type=float, default=1.0 / 3.0)
    brief.add_argument('--front-offset', type=float, default=12.0)
    brief.add_argument('--shim', type=float, default=3.0, help='Isolation shim thickness (mm)')
    brief.add_argument('--notch-height', type=float, default=0.0)
    brief.add_argument('--notch-depth', type=float, default=0.0)
    brief.add_argument('--packer', type=float, default=10.0, help='Packer thickness (mm, 0 = none)')
    brief.add_argument('--fixing-position', type=float, default=None, help='Custom fixing position (mm)')
    brief.add_argument('--dim-d', type=float, default=None, help='Custom Dim D for inverted brackets (mm)')
    brief.add_argument('--extension-limit', type=float, default=None,
                       help='Exclusion-zone limit (mm); enables angle extension')
    brief.add_argument('--channel', action='append', choices=CHANNEL_TYPES,
                       help='Restrict channel types (repeatable)')
    brief.add_argument('--steel-section', choices=STEEL_SECTION_TYPES, default=None,
                       help='Fix to a steel member instead of a cast-in channel')
    brief.add_argument('--steel-height', type=float, default=None, help='Steel section effective height (mm)')
    brief.add_argument('--steel-bolt', default='all', choices=['all', 'M10', 'M12', 'M16'])
    brief.add_argument('--steel-method', default='SET_SCREW', choices=['SET_SCREW', 'BLIND_BOLT', 'both'])
    brief.add_argument('--angle-length', type=float, default=None,
                       help='Length-limited angle (mm); default lays out a standard run')
    brief.add_argument('--run-length', type=float, default=None, help='Total run to split into angles (mm)')

    run = parser.add_argument_group("run options")
    run.add_argument('--workers', type=int, default=None, help='Worker processes (default 1)')
    run.add_argument('--top', type=int, default=None, help='Number of alternatives to list')
    run.add_argument('--channel-data', default=None, help='Channel capacity CSV')
    run.add_argument('--csv', default=None, help='Write every candidate evaluation to this CSV')
    run.add_argument('--progress', action='store_true', help='Show a progress bar')
    run.add_argument('--json-logs', action='store_true')
    run.add_argument('--log-level', default=None)
    return parser


def inputs_from_args(args: argparse.Namespace) -> DesignInputs:
    steel = None
    if args.steel_section:
        steel = SteelSection(section_type=args.steel_section, effective_height=args.steel_height or 0.0)
    return DesignInputs(
        slab_thickness=args.slab,
        cavity=args.cavity,
        support_level=args.support_level,
        characteristic_load=args.load,
        masonry_thickness=args.masonry_thickness,
        masonry_density=args.masonry_density,
        masonry_height=args.masonry_height,
        facade_thickness=args.facade_thickness,
        load_position=args.load_position,
        front_offset=args.front_offset,
        isolation_shim_thickness=args.shim,
        notch_height=args.notch_height,
        notch_depth=args.notch_depth,
        custom_fixing_position=args.fixing_position,
        custom_dim_d=args.dim_d,
        enable_angle_extension=args.extension_limit is not None,
        max_allowable_bracket_extension=args.extension_limit,
        packer_thickness=args.packer,
        frame_fixing_type='steel' if steel else 'concrete',
        steel_section=steel,
        steel_bolt_size=args.steel_bolt,
        steel_fixing_method=args.steel_method,
        allowed_channel_types=tuple(args.channel) if args.channel else None,
        fixed_angle_length=args.angle_length,
        run_length=args.run_length,
    )


SUMMARY_COLUMNS = [
    'rank', 'total_weight', 'weight_delta_percent', 'bracket_type', 'angle_orientation',
    'bracket_centres', 'bracket_thickness', 'angle_thickness', 'bolt_diameter',
    'fixing_position', 'channel_type', 'bracket_height', 'key_differences',
]


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config()
    overrides = {}
    if args.workers is not None:
        overrides['max_workers'] = args.workers
    if args.top is not None:
        overrides['top_n_alternatives'] = args.top
    if args.channel_data is not None:
        overrides['channel_data_path'] = args.channel_data
    if args.progress:
        overrides['show_progress'] = True
    if args.json_logs:
        overrides['json_logs'] = True
    if args.log_level:
        overrides['log_level'] = args.log_level
    config = replace(config, **overrides)

    setup_logging(config.log_level, json_output=config.json_logs)

    try:
        inputs = inputs_from_args(args).validate()
    except InputValidationError as exc:
        print(f"Invalid inputs: {exc}", file=sys.stderr)
        return 2

    store = load_channel_store(config.channel_data_path)
    result = run_optimization(inputs, store=store, config=config, collect_evaluations=bool(args.csv))

    if args.csv and result.evaluations is not None:
        result.evaluations.to_csv(args.csv, index=False)
        print(f"Saved {len(result.evaluations)} evaluations to {args.csv}")

    print("=" * 70)
    print("MASONRY SUPPORT DESIGN SEARCH")
    print("=" * 70)

    if not result.feasible:
        print(result.message)
        return 1

    best = result.optimum
    print(f"Candidates evaluated: {result.candidates_evaluated}")
    print(f"Candidates passing:   {result.candidates_passing}")
    print(f"Optimum:              {best.total_weight:.3f} kg/m")
    print()

    table = result.to_frame()
    columns = [c for c in SUMMARY_COLUMNS if c in table.columns]
    with pd.option_context('display.max_columns', None, 'display.width', 200):
        print(table[columns].to_string(index=False))

    if result.channel_alternatives:
        print()
        print("Best design per other fixing family:")
        for alt in result.channel_alternatives:
            print(f"  {alt.evaluation.total_weight:.3f} kg/m (+{alt.weight_delta_percent:.1f}%): "
                  f"{'; '.join(alt.key_differences)}")

    if result.layout is not None:
        layout = result.layout
        kind = "standard run" if layout.is_standard_run else "length-limited"
        print()
        print(f"Bracket layout ({kind}): {layout.angle_length:g}mm angle, "
              f"{layout.bracket_count} brackets at {layout.spacing:g}mm, "
              f"first at {layout.start_offset:g}mm")

    if result.run_layout is not None:
        run = result.run_layout
        print()
        print(f"Run layout: {run.total_length:g}mm in {len(run.pieces)} pieces, "
              f"{run.total_brackets} brackets")
        with pd.option_context('display.max_columns', None, 'display.width', 200):
            print(run.to_frame().to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
