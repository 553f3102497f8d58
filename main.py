#!/usr/bin/env python3
"""S12 Simulator Command Line Interface.

Run memory images with the S12 simulator from a source checkout.

Usage:
    python main.py programs/sum.mem
    python main.py programs/countdown.mem -o countdown -c 200 --trace
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from s12_sim.cli import main


if __name__ == "__main__":
    sys.exit(main())
