import sys
from pathlib import Path

# Modules under src/ are top-level (flat layout); make them importable for every test module.
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
