#!/usr/bin/env python3
"""
Command-line convex decomposition.

Usage:
    concave-decomp <polygon.json> [options]

The input file holds either a JSON list of [x, y] pairs or an object with
a "vertices" key containing that list.

Options:
    --config        JSON file with decomposition tolerances
    --cut           Apply a segment cut X1 Y1 X2 Y2
    --no-decompose  Skip convex decomposition
    --output        Write the leaves and tree as JSON
    --plot          Save a PNG of the leaves

Example:
    concave-decomp outline.json --plot outline.png
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import DecompositionConfig
from .geometry import Vec2, Vertex, LineSegment, is_right_handed
from .polygon import ConcavePolygon

logger = logging.getLogger(__name__)


def load_polygon_file(filepath: Path | str) -> list[tuple[float, float]]:
    """
    Load polygon vertices from a JSON file.

    Raises:
        FileNotFoundError: if the file does not exist
        json.JSONDecodeError: if the file is not valid JSON
        ValueError: if the content is not a list of (x, y) pairs
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    with open(filepath, 'r') as f:
        data = json.load(f)

    if isinstance(data, dict):
        if "vertices" not in data:
            raise ValueError("Expected a \"vertices\" key in polygon file")
        data = data["vertices"]

    if not isinstance(data, list):
        raise ValueError(f"Expected a list of [x, y] pairs, got {type(data).__name__}")

    return [Vertex.coerce(item).position.to_tuple() for item in data]


def build_result(polygon: ConcavePolygon) -> dict:
    """Leaves and full tree of a decomposition, ready for json.dump."""
    return {
        "vertices": [list(p) for p in polygon.points()],
        "leaves": [[list(p) for p in leaf.points()] for leaf in polygon.flatten_leaves()],
        "tree": polygon.to_dict(),
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Decompose a concave polygon into convex pieces',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s outline.json
  %(prog)s outline.json --output pieces.json --plot pieces.png
  %(prog)s outline.json --cut 0 -1 0 5 --no-decompose
        """
    )
    parser.add_argument('input', help='Polygon JSON file')
    parser.add_argument('--config', help='Decomposition config JSON file')
    parser.add_argument('--cut', type=float, nargs=4, metavar=('X1', 'Y1', 'X2', 'Y2'),
                        help='Cut along the segment (X1, Y1) -> (X2, Y2)')
    parser.add_argument('--no-decompose', action='store_true',
                        help='Skip convex decomposition')
    parser.add_argument('--output', help='Write leaves and tree to this JSON file')
    parser.add_argument('--plot', help='Save a PNG of the leaves to this file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log decomposition decisions')

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(levelname)s %(name)s: %(message)s')

    if args.config:
        if not Path(args.config).exists():
            print(f"ERROR: Config file not found: {args.config}")
            sys.exit(1)
        try:
            config = DecompositionConfig.load(args.config)
        except (OSError, json.JSONDecodeError, ValueError, TypeError) as e:
            print(f"ERROR: Could not read config {args.config}: {e}")
            sys.exit(1)
    else:
        config = DecompositionConfig()

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"ERROR: {error}")
        sys.exit(1)

    try:
        points = load_polygon_file(args.input)
    except (OSError, json.JSONDecodeError, ValueError, TypeError, KeyError) as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    input_winding = "right" if is_right_handed([Vertex.coerce(p) for p in points]) else "left"
    polygon = ConcavePolygon(points, config)
    print(f"Loaded polygon: {polygon.point_count} vertices ({input_winding}-handed input)")

    if not args.no_decompose:
        polygon.decompose()

    segment = None
    if args.cut:
        x1, y1, x2, y2 = args.cut
        segment = LineSegment(Vec2(x1, y1), Vec2(x2, y2))
        polygon.slice_by_segment(segment)
        if not args.no_decompose:
            for leaf in polygon.flatten_leaves():
                leaf.decompose()

    leaves = polygon.flatten_leaves()
    leaf_area = sum(leaf.area() for leaf in leaves)
    print(f"Leaves: {len(leaves)}")
    print(f"Area: {polygon.area():.6g} (leaves total {leaf_area:.6g})")

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(build_result(polygon), f, indent=2)
        print(f"Wrote {args.output}")

    if args.plot:
        import matplotlib
        matplotlib.use('Agg')
        from .visualize import save_decomposition_plot

        save_decomposition_plot(polygon, args.plot, segment=segment)
        print(f"Saved plot to {args.plot}")

    return 0


if __name__ == '__main__':
    sys.exit(main())
