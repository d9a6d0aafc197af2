# File: utils/__init__.py
"""Pure Python utilities for the Fuel Points engine.

Submodules:
    - dt_utils: Timezone conversion, DST-safe day boundaries, day counting
    - math_utils: Half-up rounding, progress percentages

Usage:
    from . import dt_utils
    from .math_utils import round_half_up
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
