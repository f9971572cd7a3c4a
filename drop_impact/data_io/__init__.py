"""データ入出力パッケージ"""

from .facets import extract_facets, read_facets, write_facets
from .hdf5_io import HDF5IO

__all__ = ["HDF5IO", "extract_facets", "write_facets", "read_facets"]
