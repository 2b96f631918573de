#!/usr/bin/env python3

"""
TMX Mesher - summary of the geometry built from a Tiled map

Usage:
    python -m tmx_mesher <map.tmx> [--collider-layer NAME ...] [--shared-tiles]

Prints the map header, one line per tile layer (vertices, triangles,
texture groups) and the colliders built for the given object layers.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import ColliderSettings, LoadOptions
from .errors import TmxError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tmx_mesher",
        description="Build render meshes and colliders from a TMX map",
    )
    parser.add_argument("source", help="path to the .tmx file")
    parser.add_argument("--collider-layer", action="append", default=[],
                        metavar="NAME", help="object layer to build colliders for")
    parser.add_argument("--collider-width", type=float, default=1.0)
    parser.add_argument("--collider-depth", type=float, default=0.0)
    parser.add_argument("--inner", action="store_true",
                        help="face collider normals inward")
    parser.add_argument("--shared-tiles", action="store_true",
                        help="share tile instances between cells (no make_unique)")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    source_path = Path(args.source)
    if not source_path.exists():
        print(f"Error: File '{source_path}' not found")
        return 1

    from .geometry.colliders import generate_colliders
    from .map.document import Map

    try:
        tmx_map = Map.load(source_path, LoadOptions(make_unique=not args.shared_tiles))
        print(tmx_map)

        print("\n=== Tile Layers ===")
        for layer, mesh in tmx_map.build_layer_meshes():
            print(f"{layer.name} (depth {layer.depth:g}): "
                  f"{mesh.vertex_count} vertices, {mesh.triangle_count} triangles, "
                  f"{len(mesh.texture_groups)} texture group(s)")
            for texture, group in mesh.texture_groups.items():
                print(f"  - {texture}: {group.tile_count} tiles")

        if args.collider_layer:
            settings = [
                ColliderSettings(name, args.collider_depth,
                                 args.collider_width, args.inner)
                for name in args.collider_layer
            ]
            colliders = generate_colliders(tmx_map, settings)
            print("\n=== Colliders ===")
            for collider in colliders:
                print(f"{type(collider).__name__}: {collider.name}")
            print(f"Total: {len(colliders)}")
    except TmxError as e:
        print(f"Error: {type(e).__name__}: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
