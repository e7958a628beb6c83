"""Put ``src`` on sys.path so pytest works from a checkout without installing."""
from __future__ import annotations

import sys
from pathlib import Path

SRC = Path(__file__).parent.resolve() / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))
