"""Script to export a reconstruction stored as a BAL or Bundler file to the NVM format.

Example:
    python scripts/export_nvm.py --bal dubrovnik-3-7-pre.txt --output results/scene.nvm

Writes results/scene.nvm and results/scene_offsets.txt.
"""

import argparse
import sys
from pathlib import Path

import sfmexport.utils.io as io_utils
import sfmexport.utils.logger as logger_utils
from sfmexport.common.reconstruction import Reconstruction

logger = logger_utils.get_logger()


def main() -> int:
    parser = argparse.ArgumentParser(description="Export a reconstruction to an NVM file.")
    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("--bal", type=str, help="Path to a Bundle Adjustment in the Large (BAL) file.")
    input_group.add_argument("--bundler", type=str, help="Path to a Bundler .out file.")
    parser.add_argument("--output", type=str, required=True, help="Path of the .nvm file to write.")
    args = parser.parse_args()

    if args.bal is not None:
        reconstruction = Reconstruction.read_bal(args.bal)
    else:
        reconstruction = Reconstruction.read_bundler(args.bundler)
    logger.info("Loaded %s", reconstruction)

    Path(args.output).parent.mkdir(parents=True, exist_ok=True)
    if not io_utils.write_nvm_file(args.output, reconstruction):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
