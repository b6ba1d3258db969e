"""
Command line entry point.

Usage:
    # Square cells of 1 km over a GeoJSON file
    python -m hextile input.geojson output.json

    # Hexagons, 2 km wide, rotated 30 degrees, as a GeoJSON FeatureCollection
    python -m hextile input.geojson output.geojson -s hexagon -w 2000 -t 30 --format geojson

    # Bounding box file ([min_lon, min_lat, max_lon, max_lat]) with a fixed origin
    python -m hextile bbox.json output.json --center 4.9,52.37

    # Options from YAML, CLI flags take precedence
    python -m hextile input.geojson output.json --config tiling.yaml
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .config import TilingConfig
from .errors import HextileError
from .geojson import load_geojson
from .lattice import SHAPES
from .output import to_feature_collection, to_records
from .tiler import hextile

logger = logging.getLogger(__name__)


def parse_lnglat(value: str) -> Tuple[float, float]:
    parts = value.split(",")
    try:
        lnglat = tuple(float(p) for p in parts)
    except ValueError:
        lnglat = ()
    if len(lnglat) != 2:
        raise argparse.ArgumentTypeError(f"expected 'longitude,latitude', got '{value}'")
    return lnglat


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hextile",
        description="Generate tile representations of polygon objects on map",
    )
    parser.add_argument("infile", help="GeoJSON file or JSON bbox [min_lon, min_lat, max_lon, max_lat]")
    parser.add_argument("outfile", help="Output JSON file")
    parser.add_argument(
        "-s", "--shape", type=str.lower, choices=SHAPES, default=None,
        help="Tile shape (default: square)",
    )
    parser.add_argument(
        "-w", "--width", type=float, default=None,
        help="Tile width in meters, clamped to [500, 500000] (default: 1000)",
    )
    parser.add_argument(
        "-t", "--tilt", type=float, default=None,
        help="Rotate tiles clockwise by this many degrees (default: 0)",
    )
    parser.add_argument(
        "-c", "--center", type=parse_lnglat, default=None,
        help="Grid origin as 'longitude,latitude' (default: bbox midpoint)",
    )
    parser.add_argument(
        "--config", default=None,
        help="YAML file with tiling options; command line flags override it",
    )
    parser.add_argument(
        "--format", choices=("features", "geojson"), default="features",
        help="'features': list of {id, address, center, ring}; "
             "'geojson': FeatureCollection (default: features)",
    )
    parser.add_argument(
        "--workers", type=int, default=None,
        help="Threads used to trace polygon boundaries (default: 1)",
    )
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def build_config(args: argparse.Namespace) -> TilingConfig:
    options = {}
    if args.config:
        options.update(TilingConfig.from_yaml(args.config).to_dict())
    overrides = {
        "shape": args.shape,
        "width": args.width,
        "tilt": args.tilt,
        "center": args.center,
        "workers": args.workers,
    }
    options.update({k: v for k, v in overrides.items() if v is not None})
    if args.progress:
        options["progress"] = True
    return TilingConfig.from_dict(options)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        geojson = load_geojson(args.infile)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read {args.infile}: {e}")
        return 1

    try:
        config = build_config(args)
        features = hextile(geojson, config)
    except (HextileError, FileNotFoundError) as e:
        logger.error(str(e))
        return 1

    if args.format == "geojson":
        payload = to_feature_collection(features)
    else:
        payload = to_records(features)

    outfile = Path(args.outfile)
    outfile.parent.mkdir(parents=True, exist_ok=True)
    with open(outfile, 'w', encoding="utf-8") as f:
        json.dump(payload, f, indent='\t')

    logger.info(f"Wrote {len(features)} cells to {outfile}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
