"""
Human-readable reports: per-metric/per-device statistics and the parameter table.
"""
import pandas as pd

from perfmon_analyzer.dto.catalog import SchemaCatalog
from perfmon_analyzer.dto.parameters import Parameters
from perfmon_analyzer.service.tokenizer import QUOTE_CHAR

NO_AVERAGE = "-"
SUMMARY_COLUMNS = ["level", "name", "max", "avg", "count"]


def summary_frame(catalog: SchemaCatalog, separator: str = "_") -> pd.DataFrame:
    """
    Statistics for every metric, and every device of array metrics.

    Zero-scale entries are included; they are only excluded from the
    output files.
    """
    rows = []
    for metric_class, metric in catalog.iter_metrics():
        rows.append({
            "level": "metric",
            "name": metric.name,
            "max": metric.max,
            "avg": metric.average,
            "count": metric.count,
        })
        if metric_class.is_vector:
            continue
        for device in metric.devices:
            rows.append({
                "level": "device",
                "name": f"{metric.name}{separator}{device.name}",
                "max": device.max,
                "avg": device.average,
                "count": device.count,
            })
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def _average(value) -> str:
    # no samples yet
    if pd.isna(value):
        return f"{NO_AVERAGE:>18}"
    return f"{value:18.1f}"


def format_summary(frame: pd.DataFrame) -> str:
    lines = ["### Summary Data ################### Max ################# Avg ######### Num"]
    for level, name, maximum, average, number in frame[SUMMARY_COLUMNS].itertuples(index=False, name=None):
        if level == "metric":
            lines.append(f"# {name:<18}  {maximum:18.1f} #  {_average(average)} {int(number):13d}")
        else:
            lines.append(f"## {name:<18} {maximum:18.1f} ## {_average(average)} {int(number):13d}")
    return "\n".join(lines)


def _quoted(value) -> str:
    if isinstance(value, float):
        value = f"{value:.1f}"
    return f"{QUOTE_CHAR}{value}{QUOTE_CHAR}"


def format_parameters(params: Parameters) -> str:
    """Active and default value of every parameter, in table order"""
    defaults = Parameters()
    lines = [
        f"# {'Parameter':<25} {'Active Value':<25} {'Default Value':<25}",
        f"# {'-' * 25} {'-' * 25} {'-' * 25}",
    ]
    for key in Parameters.parameter_names():
        active = _quoted(params.get(key))
        default = _quoted(defaults.get(key))
        lines.append(f"# {key:<25} {active:<25} # {default:<25}")
    return "\n".join(lines)
