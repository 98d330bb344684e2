import duckdb

from perfmon_analyzer.service.pipeline import ConversionPipeline
from perfmon_analyzer.service.storage import SampleStore
from conftest import write_file


def _run_store(tmp_path, sample_file, config="cpu_us 100\ntps_sda 50\n"):
    db_path = str(tmp_path / "samples.duckdb")
    config_path = write_file(tmp_path / "pma.conf", config)
    ctx = ConversionPipeline([SampleStore(db_path)], config_path=config_path).run([sample_file])
    return ctx, duckdb.connect(db_path)


def test_every_included_sample_is_stored(tmp_path, sample_file):
    _, db = _run_store(tmp_path, sample_file)

    # CPU: 2 metrics x 3 rows, IO: 2 metrics x 2 devices x 2 rows, per block
    total = db.execute("SELECT COUNT(*) FROM samples").fetchone()[0]
    assert total == 2 * (2 * 3 + 2 * 2 * 2)

    rows = db.execute("""
        SELECT epoch, raw_value, scaled_value
        FROM samples
        WHERE metric = 'tps' AND device = 'sda'
        ORDER BY epoch
    """).fetchall()
    assert rows == [
        (1700000020, 11.0, 22.0),
        (1700000030, 12.0, 24.0),
        (1700000050, 14.0, 28.0),
        (1700000060, 15.0, 30.0),
    ]


def test_zero_scale_samples_have_no_scaled_value(tmp_path, sample_file):
    _, db = _run_store(tmp_path, sample_file)
    nulls = db.execute("""
        SELECT COUNT(*) FROM samples WHERE metric = 'cpu_sy' AND scaled_value IS NULL
    """).fetchone()[0]
    assert nulls == 6


def test_device_stats_match_the_catalog(tmp_path, sample_file):
    ctx, db = _run_store(tmp_path, sample_file)
    stats = {
        (metric, device): (n, mx, total)
        for metric, device, n, mx, total in db.execute(
            "SELECT metric, device, n, max, sum FROM device_stats"
        ).fetchall()
    }
    assert len(stats) == 6
    for _, metric, device in ctx.catalog.iter_devices():
        assert stats[(metric.name, device.name)] == (device.count, device.max, device.sum)


def test_rerun_replaces_previous_samples(tmp_path, sample_file):
    _run_store(tmp_path, sample_file)[1].close()
    _, db = _run_store(tmp_path, sample_file)
    assert db.execute("SELECT COUNT(*) FROM samples").fetchone()[0] == 28
