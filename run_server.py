#!/usr/bin/env python3
"""Start the image-finder API from a source checkout without installing it."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from image_finder.web.__main__ import main

if __name__ == "__main__":
    main()
