"""
Command-line interface for perfmon-analyzer
"""
import argparse
import logging
import sys

from perfmon_analyzer import __version__
from perfmon_analyzer.dto.context import RunContext
from perfmon_analyzer.errors import FatalError
from perfmon_analyzer.service.clockticks import ClockticksEmitter
from perfmon_analyzer.service.config import apply_config_file
from perfmon_analyzer.service.emitters import MultiFileEmitter, SingleFileEmitter
from perfmon_analyzer.service.pipeline import ConversionPipeline
from perfmon_analyzer.service.storage import SampleStore
from perfmon_analyzer.service.summary import format_parameters, format_summary, summary_frame


class CLI:
    """Main command-line interface class"""

    def run(self, args=None) -> int:
        """Run CLI"""
        parser = self.create_parser()
        args = parser.parse_args(args)

        if not hasattr(args, 'func'):
            parser.print_help()
            return 1

        self.setup_logging(getattr(args, 'verbose', 0))
        try:
            return args.func(args) or 0
        except FatalError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    def setup_logging(self, verbosity: int):
        level = logging.WARNING
        if verbosity == 1:
            level = logging.INFO
        elif verbosity > 1:
            level = logging.DEBUG
        logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr, force=True)

    def create_parser(self):
        """Create command-line argument parser"""
        parser = argparse.ArgumentParser(
            prog='perfmon-analyzer',
            description='Convert pmc performance monitor data into graphable time series'
        )
        parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

        subparsers = parser.add_subparsers(title='Subcommands', dest='command')

        # convert command - the main conversion run
        convert_parser = subparsers.add_parser('convert', help='Convert input file(s) ("-" reads stdin)')
        convert_parser.add_argument(
            'inputs',
            nargs='+',
            help='Input data file(s), processed in order as one time series'
        )
        convert_parser.add_argument(
            '-c', '--configurationfile',
            help='Configuration file with scale values and parameter overrides'
        )
        convert_parser.add_argument(
            '-s', '--singlefile',
            help='Single output file name (all active metrics as columns)'
        )
        convert_parser.add_argument(
            '-m', '--multifiledirectory',
            help='Directory for one output file per active metric/device, plus clockticks'
        )
        convert_parser.add_argument(
            '--duckdb',
            help='DuckDB database to store every sample in'
        )
        convert_parser.add_argument(
            '-d', '--datavalues',
            action='store_true',
            help='Print the max/avg/count summary'
        )
        convert_parser.add_argument(
            '-p', '--parameters',
            action='store_true',
            help='Print the parameter table'
        )
        convert_parser.add_argument(
            '-v', '--verbose',
            action='count',
            default=0,
            help='More diagnostics (repeat for more)'
        )
        convert_parser.set_defaults(func=self.handle_convert)

        # params command - parameter table only
        params_parser = subparsers.add_parser('params', help='Display the parameter table')
        params_parser.add_argument(
            '-c', '--configurationfile',
            help='Configuration file with parameter overrides'
        )
        params_parser.set_defaults(func=self.handle_params)

        return parser

    def build_emitters(self, args):
        emitters = []
        if args.singlefile:
            emitters.append(SingleFileEmitter(args.singlefile))
        if args.multifiledirectory:
            emitters.append(MultiFileEmitter(args.multifiledirectory))
            emitters.append(ClockticksEmitter(args.multifiledirectory))
        if args.duckdb:
            emitters.append(SampleStore(args.duckdb))
        return emitters

    def handle_convert(self, args):
        """Handle convert command"""
        emitters = self.build_emitters(args)
        if not emitters:
            print("Warning: no output file has been specified!", file=sys.stderr)

        pipeline = ConversionPipeline(emitters, config_path=args.configurationfile)
        ctx = pipeline.run(args.inputs)

        if args.parameters:
            print(format_parameters(ctx.params))
        if args.datavalues:
            print(format_summary(summary_frame(ctx.catalog, ctx.params.metricdeviceseparator)))

        if len(ctx.diagnostics):
            print(f"{len(ctx.diagnostics)} problem(s) reported", file=sys.stderr)
        return 0

    def handle_params(self, args):
        """Handle params command"""
        ctx = RunContext()
        if args.configurationfile:
            # no catalog yet, so scale lines show up as unknown keys
            apply_config_file(args.configurationfile, ctx)
        print(format_parameters(ctx.params))
        return 0


def main(argv=None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
