"""
perfmon-analyzer - converts pmc performance-monitor logs into graphable time series
"""

__version__ = "0.1.0"

from .errors import FatalError, Diagnostics
from .dto import SchemaCatalog, Parameters, RunContext
from .service import ConversionPipeline

__all__ = [
    'FatalError',
    'Diagnostics',
    'SchemaCatalog',
    'Parameters',
    'RunContext',
    'ConversionPipeline',
]
