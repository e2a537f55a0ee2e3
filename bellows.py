#!/usr/bin/env python3
"""
BELLOWS.PY - Expansion joint deformation visualizer with SVG output

Solves the deformed geometry of a pipe expansion joint and writes it as
SVG. Joint types and geometry constants come from the built-in catalog
and bellows_config.json.

Usage:
    python3 bellows.py --joint universal --lateral 50     # One SVG
    python3 bellows.py --joint hinged --angular 15 --solid
    python3 bellows.py --joint axial --frames 60          # Animation frames
    python3 bellows.py --joint gimbal --report-only       # Report, no SVG
"""

import argparse
import logging
import math
import sys

from bellows_animation import animation_states
from bellows_assembly import compose_assembly
from bellows_config import load_config
from bellows_kinematics import solve
from bellows_models import DeformationState, JointSolution, JointType
from bellows_renderer import BellowsRenderer
from bellows_validation import print_constraint_report, validate_solution
from joint_catalog import get_joint_config, load_catalog, status_line


def print_solution_report(solution: JointSolution):
    """Print segment layout, flange and hardware poses."""
    state = solution.state
    print("\n" + "=" * 60)
    print(f"JOINT: {solution.joint_type.value.upper()}")
    print("=" * 60)
    print(f"  Axial:    {state.axial:6.1f} %")
    print(f"  Lateral:  {state.lateral:6.1f} %  ({solution.lateral_displacement:.1f} units)")
    print(f"  Angular:  {state.angular:6.1f} deg")
    print(f"  Pressure: {state.pressure:6.1f} bar")
    print(f"  Total length: {solution.total_length:.1f}")

    print("\n  #  Kind      Length   Bend(deg)  Convs   Start (x, y, rot)")
    print("  " + "-" * 58)
    for i, seg in enumerate(solution.segments):
        t = seg.local_transform
        print(f"  {i}  {seg.kind.value:8s}  {seg.length:6.1f}   {math.degrees(seg.bend_angle):8.2f}"
              f"   {seg.convolution_count:5d}   ({t.x:.1f}, {t.y:.1f}, {t.rotation_deg:.1f})")

    far = solution.far_flange
    print(f"\n  Far flange: ({far.x:.2f}, {far.y:.2f}) rot {far.rotation_deg:.2f} deg")
    if solution.hardware is not None:
        pivot = solution.hardware.pivot
        print(f"  {solution.hardware.kind.value.capitalize()} pivot: ({pivot.x:.2f}, {pivot.y:.2f})"
              f" rot {pivot.rotation_deg:.2f} deg")

    print(f"\n  {status_line(state)}")


# =============================================================================
# MAIN
# =============================================================================

def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate expansion joint SVG')
    parser.add_argument('--joint', default='axial',
                        choices=[t.value for t in JointType],
                        help='Joint type (default: axial)')
    parser.add_argument('--axial', type=float, default=0.0,
                        help='Axial deformation in %% of nominal travel (-100..100)')
    parser.add_argument('--lateral', type=float, default=0.0,
                        help='Lateral offset in %% of nominal travel (0..100)')
    parser.add_argument('--angular', type=float, default=0.0,
                        help='Angular rotation in degrees (-20..20)')
    parser.add_argument('--pressure', type=float, default=0.0,
                        help='Internal pressure in bar, visual only (0..50)')
    parser.add_argument('--solid', action='store_true',
                        help='Solid rendering instead of cross-section')
    parser.add_argument('--config', default=None,
                        help='Path to geometry config JSON')
    parser.add_argument('--catalog', default=None,
                        help='Path to joint catalog JSON')
    parser.add_argument('--output', default='bellows.svg',
                        help='Output SVG path (default: bellows.svg)')
    parser.add_argument('--frames', type=int, default=0,
                        help='Write N auto-oscillate frames instead of one SVG')
    parser.add_argument('--report-only', action='store_true',
                        help='Only print the report, do not generate SVG')
    parser.add_argument('--skip-validation', action='store_true',
                        help='Skip geometry validation')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    try:
        config = load_config(args.config)
        catalog = load_catalog(args.catalog) if args.catalog else None
    except (OSError, ValueError, KeyError) as e:
        print(f"ERROR: could not load configuration: {e}")
        sys.exit(1)

    joint_type = JointType(args.joint)
    state = DeformationState(
        axial=args.axial,
        lateral=args.lateral,
        angular=args.angular,
        pressure=args.pressure,
        cross_section=not args.solid,
    ).clamped()

    try:
        solution = solve(joint_type, state, config, catalog)
    except (NotImplementedError, KeyError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print_solution_report(solution)

    if not args.skip_validation:
        violations = validate_solution(solution, config)
        print_constraint_report(violations)
        if any(v.severity == "error" for v in violations):
            print("WARNING: Geometry has constraint violations!")
    else:
        print("\n(Geometry validation skipped)")

    if args.report_only:
        return

    if args.frames > 0:
        joint = get_joint_config(joint_type, catalog)
        base_output = args.output.replace('.svg', '')
        for i, frame_state in enumerate(animation_states(joint, state, args.frames,
                                                         config.animation_speed)):
            frame = solve(joint_type, frame_state, config, catalog)
            BellowsRenderer(compose_assembly(frame, config)).render(f"{base_output}_{i:03d}.svg")
        print(f"\nGenerated {args.frames} frames: {base_output}_000.svg ... "
              f"{base_output}_{args.frames - 1:03d}.svg")
    else:
        BellowsRenderer(compose_assembly(solution, config)).render(args.output)


if __name__ == '__main__':
    main()
