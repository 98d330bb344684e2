"""
Run context passed to the engine and the output emitters.
"""
from typing import Optional

from perfmon_analyzer.dto.catalog import Device, SchemaCatalog
from perfmon_analyzer.dto.parameters import Parameters
from perfmon_analyzer.errors import Diagnostics


class RunContext:
    """Everything one conversion run shares: catalog, parameters, diagnostics"""

    def __init__(self, catalog: Optional[SchemaCatalog] = None,
                 params: Optional[Parameters] = None,
                 diagnostics: Optional[Diagnostics] = None):
        self.catalog = catalog if catalog is not None else SchemaCatalog()
        self.params = params if params is not None else Parameters()
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def scaled(self, device: Device, raw):
        """fullscale / scale * raw; works on scalars and numpy arrays"""
        return self.params.fullscale / device.scale * raw
