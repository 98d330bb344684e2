"""
Configuration file overlay.

Each line is ``<key> <value>``. A key is a metric name, a
``<metric><separator><device>`` name (both set scale values) or a parameter
name. Anything after ``#`` is ignored.
"""
import logging
import os
import time

from pydantic import ValidationError

from perfmon_analyzer.dto.context import RunContext
from perfmon_analyzer.errors import FatalError
from perfmon_analyzer.service.tokenizer import DECODE_ERRORS, INPUT_ENCODING, parse_input_line

logger = logging.getLogger(__name__)


def parse_scale(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def apply_scale(ctx: RunContext, key: str, value: str) -> bool:
    """Set device scale(s) for a metric or metric/device key; True if it matched"""
    separator = ctx.params.metricdeviceseparator
    matched = False

    for metric_class, metric in ctx.catalog.iter_metrics():
        if key == metric.name:
            # vector: the implicit device; array: every device of the metric
            for device in metric.devices:
                device.scale = parse_scale(value)
            matched = True
        elif not metric_class.is_vector:
            for device in metric.devices:
                if key == f"{metric.name}{separator}{device.name}":
                    device.scale = parse_scale(value)
                    matched = True
                    break
    return matched


def apply_parameter(ctx: RunContext, key: str, value: str, source: str, line: int) -> bool:
    """Override a parameter; True if the key names one"""
    if not ctx.params.has_parameter(key):
        return False
    try:
        ctx.params.set(key, value)
    except ValidationError as e:
        ctx.diagnostics.report(
            "bad_config_value",
            f"Bad value '{value}' for parameter '{key}': {e.errors()[0]['msg']}",
            source, line,
        )
    return True


def apply_timezone(tz: str):
    """Use TZ for all local-time formatting, if one is set"""
    if tz:
        os.environ["TZ"] = tz
        time.tzset()


def apply_config_file(path: str, ctx: RunContext) -> int:
    """
    Read a configuration file into the catalog scales and the parameter table

    Returns:
        Number of lines applied
    """
    try:
        handle = open(path, "r", encoding=INPUT_ENCODING, errors=DECODE_ERRORS)
    except OSError as e:
        raise FatalError(f"Could not open configuration file '{path}': {e}")

    applied = 0
    with handle:
        for line_number, line in enumerate(handle, start=1):
            fields = parse_input_line(line, 2)
            if not fields:
                continue
            if len(fields) != 2:
                ctx.diagnostics.report(
                    "bad_config_line", f"Bad configuration file line starting '{fields[0]}'",
                    path, line_number,
                )
                continue

            key, value = fields
            matched = apply_scale(ctx, key, value)
            if apply_parameter(ctx, key, value, path, line_number):
                matched = True

            if matched:
                applied += 1
            else:
                ctx.diagnostics.report(
                    "unknown_config_key", f"Ignoring unknown configuration file parameter '{key}'",
                    path, line_number,
                )

    apply_timezone(ctx.params.tz)
    return applied
