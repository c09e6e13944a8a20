"""Camera module for primary ray generation.

Ray generation uses normalized image coordinates:
    x in [0, 1]: left to right across image
    y in [0, 1]: bottom to top across image
"""

from .pinhole import PinholeCamera

__all__ = ["PinholeCamera"]
