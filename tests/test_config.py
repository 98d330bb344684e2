import os

import pytest

from perfmon_analyzer.dto.context import RunContext
from perfmon_analyzer.dto.parameters import Parameters
from perfmon_analyzer.errors import FatalError
from perfmon_analyzer.service.bootstrap import Bootstrapper
from perfmon_analyzer.service.config import apply_config_file
from conftest import SAMPLE, reader_for, write_file


@pytest.fixture
def ctx():
    ctx = RunContext()
    Bootstrapper(ctx.catalog, ctx.diagnostics).run(reader_for(SAMPLE))
    return ctx


def _scales(ctx):
    return {(m.name, d.name): d.scale for _, m, d in ctx.catalog.iter_devices()}


def test_metric_and_metric_device_scales(tmp_path, ctx):
    path = write_file(tmp_path / "pma.conf", "cpu_us 100  # percent\ntps 50\nrkb_sdb 1000\n")
    applied = apply_config_file(path, ctx)

    assert applied == 3
    assert _scales(ctx) == {
        ("cpu_us", "None"): 100.0,
        ("cpu_sy", "None"): 0.0,
        ("tps", "sda"): 50.0,
        ("tps", "sdb"): 50.0,
        ("rkb", "sda"): 0.0,
        ("rkb", "sdb"): 1000.0,
    }
    assert len(ctx.diagnostics) == 0


def test_parameters_are_typed(tmp_path, ctx):
    config = (
        "fullscale 10\n"
        "singlefiledelimiter '|'\n"
        "multifiledelimiter tab\n"
        "clockticks_level_0 3600\n"
        "multifileheaderformat '%s = %.2f'\n"
    )
    apply_config_file(write_file(tmp_path / "pma.conf", config), ctx)

    params = ctx.params
    assert params.fullscale == 10.0
    assert params.singlefiledelimiter == "|"
    assert params.multifiledelimiter == "t"
    assert params.clockticks_level_0 == 3600
    assert params.multifileheaderformat == "%s = %.2f"


def test_separator_change_applies_to_later_lines(tmp_path, ctx):
    config = "metricdeviceseparator .\ntps.sdb 7\n"
    apply_config_file(write_file(tmp_path / "pma.conf", config), ctx)
    assert _scales(ctx)[("tps", "sdb")] == 7.0
    assert ctx.catalog.active_columns(ctx.params.metricdeviceseparator)[0][0] == "tps.sdb"


def test_unknown_keys_and_bad_lines_are_reported(tmp_path, ctx):
    config = "nosuchmetric 5\nlonely\nfullscale lots\ncpu_us 100\n"
    applied = apply_config_file(write_file(tmp_path / "pma.conf", config), ctx)

    assert applied == 2
    assert ctx.diagnostics.count("unknown_config_key") == 1
    assert ctx.diagnostics.count("bad_config_line") == 1
    assert ctx.diagnostics.count("bad_config_value") == 1
    assert ctx.params.fullscale == 100.0
    assert _scales(ctx)[("cpu_us", "None")] == 100.0

    unknown = next(r for r in ctx.diagnostics.records if r.kind == "unknown_config_key")
    assert unknown.line == 1
    assert "nosuchmetric" in unknown.message


def test_missing_config_file_is_fatal(tmp_path, ctx):
    with pytest.raises(FatalError, match="configuration file"):
        apply_config_file(str(tmp_path / "absent.conf"), ctx)


def test_timezone_is_exported(tmp_path, ctx, utc):
    apply_config_file(write_file(tmp_path / "pma.conf", "TZ UTC\n"), ctx)
    assert ctx.params.tz == "UTC"
    assert os.environ["TZ"] == "UTC"


def test_parameter_table_order_and_defaults():
    names = Parameters.parameter_names()
    assert names[:3] == ["fullscale", "TZ", "metricdeviceseparator"]
    assert names[-1] == "clockticks_level_7"
    assert len(names) == 17
    assert Parameters().clockticks_levels() == [86400, 43200, 21600, 3600, 1800, 900, 300, 0]


def test_timezone_is_only_recognized_by_its_table_name(tmp_path, ctx):
    applied = apply_config_file(write_file(tmp_path / "pma.conf", "tz UTC\n"), ctx)

    assert applied == 0
    assert ctx.params.tz == ""
    assert ctx.diagnostics.count("unknown_config_key") == 1
    assert not Parameters().has_parameter("tz")
    assert Parameters().has_parameter("TZ")
