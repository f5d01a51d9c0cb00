"""Command-line interface for the unlit baker.

stdout carries exactly one JSON value: an array with the baked texture path
(or null) for every material, or a bare ``null`` when the run could not
start. Everything else goes to stderr through logging.
"""

import argparse
import json
import logging
import os
import sys

from .config import BakeConfig
from .core import setup_logging
from .errors import AssetDescriptionError

logger = logging.getLogger("unlit_baker")


def _fail(message: str):
    logger.error(message)
    print(json.dumps(None))
    sys.exit(1)


def main():
    """Parse CLI arguments, bake the asset, and print the JSON result array."""
    parser = argparse.ArgumentParser(
        description="Generate unlit textures for the materials of a glTF asset.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  unlit-baker scene.gltf
  unlit-baker scene.gltf -o ./unlit --lighten 0.1
  unlit-baker scene.glb --config bake.yaml --write-gltf
  unlit-baker --generate-config -c bake.yaml
        """
    )
    parser.add_argument("input", nargs="?", help="Input .gltf/.glb file")
    parser.add_argument("--output", "-o",
                        help="Output directory (default: the input file's directory)")
    parser.add_argument("--lighten", type=float,
                        help="Lift added to base color RGB, in [0, 1]")
    parser.add_argument("--config", "-c", help="Path to config YAML")
    parser.add_argument("--workers", type=int, help="Max parallel materials")
    parser.add_argument("--write-gltf", action="store_true",
                        help="Write a copy of the asset linking the unlit textures")
    parser.add_argument("--generate-config", action="store_true",
                        help="Generate default config YAML")
    parser.add_argument("--log-level",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])

    args = parser.parse_args()

    if args.generate_config:
        config = BakeConfig()
        dest = args.config or "unlit_baker.yaml"
        if os.path.isdir(dest):
            dest = os.path.join(dest, "unlit_baker.yaml")
        config.to_yaml(dest)
        print(f"Generated default {dest}", file=sys.stderr)
        return

    # Make early config warnings visible before full logging is configured.
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

    if args.config:
        if not os.path.exists(args.config):
            _fail(f"Config file not found: {args.config}")
        try:
            config = BakeConfig.from_yaml(args.config)
        except ValueError as e:
            _fail(f"Invalid config file '{args.config}': {e}")
    else:
        config = BakeConfig()

    # CLI overrides
    if args.output:
        config.output_dir = args.output
    if args.lighten is not None:
        config.composite.lighten = args.lighten
    if args.workers is not None:
        config.max_workers = args.workers
    if args.write_gltf:
        config.alt_materials.enabled = True
    if args.log_level:
        config.log_level = args.log_level

    try:
        config.validate()
    except ValueError as e:
        _fail(str(e))

    setup_logging(config.log_level, config.log_file or None)

    if not args.input:
        _fail("Please provide a path to a .gltf or .glb file")

    from .pipeline import UnlitBakePipeline
    pipeline = UnlitBakePipeline(config)
    try:
        pipeline.run(args.input)
    except AssetDescriptionError as e:
        _fail(str(e))

    print(json.dumps(pipeline.output_paths()))


if __name__ == "__main__":
    main()
