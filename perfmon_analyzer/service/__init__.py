from .tokenizer import parse_input_line, StanzaReader, open_input
from .bootstrap import Bootstrapper, bootstrap
from .ingest import IngestionEngine
from .config import apply_config_file
from .emitters import BlockEmitter, SingleFileEmitter, MultiFileEmitter
from .clockticks import ClockticksEmitter, generate_clockticks
from .storage import SampleStore
from .summary import summary_frame, format_summary, format_parameters
from .pipeline import ConversionPipeline

__all__ = [
    'parse_input_line',
    'StanzaReader',
    'open_input',
    'Bootstrapper',
    'bootstrap',
    'IngestionEngine',
    'apply_config_file',
    'BlockEmitter',
    'SingleFileEmitter',
    'MultiFileEmitter',
    'ClockticksEmitter',
    'generate_clockticks',
    'SampleStore',
    'summary_frame',
    'format_summary',
    'format_parameters',
    'ConversionPipeline',
]
