"""
Conversion pipeline: bootstrap on the first input, then ingest every input
in order as one continuous time series.
"""
import logging
from typing import Iterable, List, Optional

from perfmon_analyzer.dto.context import RunContext
from perfmon_analyzer.errors import FatalError
from perfmon_analyzer.service.bootstrap import Bootstrapper
from perfmon_analyzer.service.config import apply_config_file
from perfmon_analyzer.service.ingest import IngestionEngine
from perfmon_analyzer.service.tokenizer import StanzaReader, open_input

logger = logging.getLogger(__name__)


class ConversionPipeline:
    """Runs bootstrap, configuration, ingestion and output for a list of inputs"""

    def __init__(self, emitters: Optional[Iterable] = None, config_path: Optional[str] = None,
                 ctx: Optional[RunContext] = None):
        self.emitters: List = list(emitters or [])
        self.config_path = config_path
        self.ctx = ctx or RunContext()
        self.engine = IngestionEngine(self.ctx, self.emitters)
        self.bootstrapped = False

    def run(self, input_paths: Iterable[str]) -> RunContext:
        try:
            for path in input_paths:
                logger.info("Processing input file '%s'", path)
                try:
                    reader = open_input(path)
                except OSError as e:
                    self.ctx.diagnostics.report("input_open", f"Could not open input file, skipping: {e}", path)
                    continue

                with reader:
                    if not self.bootstrapped:
                        self.start(reader)
                    self.engine.ingest(reader)

            if not self.bootstrapped:
                raise FatalError("No input file could be read")
        finally:
            if self.bootstrapped:
                self.finish()
        return self.ctx

    def start(self, reader: StanzaReader):
        """Bootstrap the catalog from the first input, then open the outputs"""
        if reader.is_stdin:
            logger.info("First data set skipped when using stdin as the first input file")
        Bootstrapper(self.ctx.catalog, self.ctx.diagnostics).run(reader)
        if self.config_path:
            apply_config_file(self.config_path, self.ctx)

        self.bootstrapped = True
        for emitter in self.emitters:
            emitter.open(self.ctx)

    def finish(self):
        for emitter in self.emitters:
            emitter.close(self.ctx)

