# service/db.py
from __future__ import annotations
import duckdb
from pathlib import Path

DEFAULT_DB = "data/perfmon.duckdb"

DDL = """
CREATE TABLE IF NOT EXISTS samples (
  ts            TIMESTAMP,
  epoch         BIGINT,
  class_name    TEXT,
  metric        TEXT,
  device        TEXT,
  raw_value     DOUBLE,
  scaled_value  DOUBLE
);
CREATE TABLE IF NOT EXISTS device_stats (
  class_name  TEXT,
  metric      TEXT,
  device      TEXT,
  scale       DOUBLE,
  n           BIGINT,
  max         DOUBLE,
  sum         DOUBLE
);
CREATE INDEX IF NOT EXISTS idx_samples_epoch ON samples(epoch);
CREATE INDEX IF NOT EXISTS idx_samples_metric ON samples(metric);
"""

def get_conn(db_path: str = DEFAULT_DB) -> duckdb.DuckDBPyConnection:
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    con = duckdb.connect(db_path)
    con.execute(DDL)
    return con
