"""Environment knobs, read once at import."""

from __future__ import annotations

import os
from typing import Final

COMPILE_CACHE_MAX: Final[int] = max(1, int(os.environ.get("RPN_RAT_COMPILE_CACHE_MAX", "256")))
USE_COMPILE_CACHE: Final[bool] = os.environ.get("RPN_RAT_DISABLE_COMPILE_CACHE", "0") != "1"
OPTIMIZE_BY_DEFAULT: Final[bool] = os.environ.get("RPN_RAT_DISABLE_OPTIMIZE", "0") != "1"

# Largest integer result, in bits, that LSH, EXP, BINOMIAL and MULRANGE may build.
MAX_RESULT_BITS: Final[int] = max(64, int(os.environ.get("RPN_RAT_MAX_RESULT_BITS", str(1 << 24))))
