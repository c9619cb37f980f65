"""
mcdoc to sandstone TypeScript declarations
"""

# Handler registration happens on import of these modules
from . import dispatch, expressions, structs  # noqa: F401
from .compiler import McdocCompiler
from .config import GeneratorOptions
from .errors import DownloadError, InvalidAttributeError, ShapeError, TypegenError, UnsupportedDispatcherError
from .expressions import compile_type
from .generator import TypesGenerator
from .mcdoc_types import SymbolTable, load_dispatchers, parse_type

__version__ = "0.1.0"

__all__ = [
    'DownloadError',
    'GeneratorOptions',
    'InvalidAttributeError',
    'McdocCompiler',
    'ShapeError',
    'SymbolTable',
    'TypegenError',
    'TypesGenerator',
    'UnsupportedDispatcherError',
    'compile_type',
    'load_dispatchers',
    'parse_type',
]
