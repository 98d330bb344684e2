from .catalog import ClassKind, Device, Metric, MetricClass, SchemaCatalog, NO_DEVICE_NAME
from .parameters import Parameters
from .context import RunContext

__all__ = [
    'ClassKind',
    'Device',
    'Metric',
    'MetricClass',
    'SchemaCatalog',
    'NO_DEVICE_NAME',
    'Parameters',
    'RunContext',
]
