"""可視化パッケージ"""

from .renderer import MOVIES, MovieRenderer, MovieSpec, slice_data

__all__ = ["MovieRenderer", "MovieSpec", "MOVIES", "slice_data"]
