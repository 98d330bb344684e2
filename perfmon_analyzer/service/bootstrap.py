"""
Bootstrap: discover the dataset's shape from the first input file.

Reads TIME_VALUES, METADATA, the first DATE and one data stanza per class to
build the schema catalog, then rewinds the input so the ingestion engine can
read it again from the top.
"""
import logging

from perfmon_analyzer.dto.catalog import ClassKind, NO_DEVICE_NAME, SchemaCatalog
from perfmon_analyzer.errors import Diagnostics, FatalError
from perfmon_analyzer.service.tokenizer import StanzaReader

logger = logging.getLogger(__name__)

TIME_VALUES_STANZA = "TIME_VALUES:"
METADATA_STANZA = "METADATA:"
DATE_STANZA = "DATE:"

NUM_TIME_VALUES = 2     # count, interval; anything after is a comment
NUM_META_ITEMS = 3      # class name, type tag, start row
NUM_DATE_ARGS = 1


class Bootstrapper:
    """Builds a SchemaCatalog from the header stanzas and first block of a source"""

    def __init__(self, catalog: SchemaCatalog, diagnostics: Diagnostics):
        self.catalog = catalog
        self.diagnostics = diagnostics

    def run(self, reader: StanzaReader) -> SchemaCatalog:
        self.read_time_values(reader)
        self.read_metadata(reader)
        self.read_first_timestamp(reader)
        self.discover_devices(reader)
        self.catalog.check_metric_names()

        if not reader.rewind():
            logger.info("First data block of %s used for bootstrap only", reader.name)
        return self.catalog

    def read_time_values(self, reader: StanzaReader):
        reader.skip_to_stanza(TIME_VALUES_STANZA)

        while True:
            fields = reader.read_fields(NUM_TIME_VALUES)
            if not fields:
                break
            if len(fields) != NUM_TIME_VALUES:
                raise FatalError(
                    f"Bad time values at line {reader.line_number} starting '{fields[0]}'"
                )
            try:
                self.catalog.count = int(fields[0])
                self.catalog.interval = int(fields[1])
            except ValueError:
                raise FatalError(
                    f"Bad time values at line {reader.line_number}: {' '.join(fields)}"
                )

        if self.catalog.count <= 0 or self.catalog.interval <= 0:
            raise FatalError(
                f"Time values must be positive (count={self.catalog.count}, "
                f"interval={self.catalog.interval})"
            )

    def read_metadata(self, reader: StanzaReader):
        reader.skip_to_stanza(METADATA_STANZA)

        while True:
            fields = reader.read_fields()
            if not fields:
                break
            if len(fields) < NUM_META_ITEMS + 1:
                self.diagnostics.report(
                    "bad_metadata",
                    f"Bad class '{fields[0]}' metadata",
                    reader.name, reader.line_number,
                )
                continue

            name, tag, start = fields[:NUM_META_ITEMS]
            try:
                kind = ClassKind(tag[0])
            except ValueError:
                raise FatalError(
                    f"Class '{name}': bad type '{tag[0]}': must be "
                    f"'{ClassKind.VECTOR.value}' or '{ClassKind.ARRAY.value}'"
                )

            try:
                start_row = int(start)
            except ValueError:
                start_row = 0
            if start_row < 1 or start_row > self.catalog.count:
                raise FatalError(
                    f"Class '{name}': bad start row '{start}': must be 1 to {self.catalog.count}"
                )

            self.catalog.add_class(name, kind, start_row - 1, fields[NUM_META_ITEMS:])

        if not self.catalog.classes:
            raise FatalError("No classes found in the METADATA stanza")

    def read_first_timestamp(self, reader: StanzaReader):
        reader.skip_to_stanza(DATE_STANZA)

        times_set = 0
        while True:
            fields = reader.read_fields(NUM_DATE_ARGS)
            if not fields:
                break
            try:
                self.catalog.first_timestamp = int(fields[0])
                times_set += 1
            except ValueError:
                self.diagnostics.report(
                    "bad_date", f"Date error: '{fields[0]}'",
                    reader.name, reader.line_number,
                )

        if times_set != 1:
            raise FatalError(
                f"First timestamp was set {times_set} times at/near line "
                f"{reader.line_number}; must be 1"
            )

    def discover_devices(self, reader: StanzaReader):
        """Register devices from the first data stanza of every class"""
        rows = self.catalog.count

        for metric_class in self.catalog.classes:
            reader.skip_to_stanza(metric_class.stanza)

            if metric_class.is_vector:
                # one line, one implicit device per metric
                fields = reader.read_fields()
                if fields is None:
                    raise FatalError(f"No data for vector class {metric_class.name}")
                if len(fields) != metric_class.num_metrics:
                    raise FatalError(
                        f"Bad input line {reader.line_number} in class {metric_class.name}: "
                        f"{metric_class.num_metrics} vector metrics required, found {len(fields)}"
                    )
                for metric in metric_class.metrics:
                    metric.add_device(NO_DEVICE_NAME, rows)
            else:
                while True:
                    fields = reader.read_fields()
                    if not fields:
                        break
                    if len(fields) != metric_class.num_metrics + 1:
                        raise FatalError(
                            f"Bad input line {reader.line_number} in class {metric_class.name}: "
                            f"{metric_class.num_metrics} array metrics required, "
                            f"found {len(fields) - 1}"
                        )
                    for metric in metric_class.metrics:
                        metric.add_device(fields[0], rows)
                if not metric_class.metrics[0].devices:
                    raise FatalError(f"No devices found for array class {metric_class.name}")


def bootstrap(reader: StanzaReader, diagnostics: Diagnostics = None) -> SchemaCatalog:
    """Build a fresh catalog from ``reader``"""
    return Bootstrapper(SchemaCatalog(), diagnostics or Diagnostics()).run(reader)
