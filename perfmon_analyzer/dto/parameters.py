"""
Typed parameter table with compile-time defaults.

Field order is the table order used by the parameter dump. Every value can be
overridden from the configuration file by its parameter name.
"""
from typing import Any, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

NUM_CLOCKTICKS_LEVELS = 8

CHARACTER_PARAMETERS = ("singlefiledelimiter", "multifiledelimiter")


class Parameters(BaseModel):
    """Configuration parameters, overridable from the configuration file"""
    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    fullscale: float = 100.0
    tz: str = Field("", alias="TZ")
    metricdeviceseparator: str = "_"
    singlefiledateformat: str = "%x %X"
    singlefiledelimiter: str = ","
    multifiledateformat: str = "%s"
    multifiledelimiter: str = " "
    multifileheaderformat: str = '"%s|%.1f"'
    clockticksfilename: str = "clockticks"
    clockticks_level_0: int = 24 * 60 * 60
    clockticks_level_1: int = 12 * 60 * 60
    clockticks_level_2: int = 6 * 60 * 60
    clockticks_level_3: int = 60 * 60
    clockticks_level_4: int = 30 * 60
    clockticks_level_5: int = 15 * 60
    clockticks_level_6: int = 5 * 60
    clockticks_level_7: int = 0

    @field_validator(*CHARACTER_PARAMETERS, mode="before")
    @classmethod
    def _single_character(cls, value: Any) -> str:
        value = str(value)
        if not value:
            raise ValueError("a character parameter needs one character")
        return value[0]

    @classmethod
    def parameter_names(cls) -> List[str]:
        return [info.alias or name for name, info in cls.model_fields.items()]

    @classmethod
    def _field_for(cls, key: str):
        for name, info in cls.model_fields.items():
            if key == (info.alias or name):
                return name
        return None

    def has_parameter(self, key: str) -> bool:
        return self._field_for(key) is not None

    def get(self, key: str) -> Any:
        name = self._field_for(key)
        if name is None:
            raise KeyError(key)
        return getattr(self, name)

    def set(self, key: str, value: Any):
        """Set a parameter by its configuration name; raises ValidationError on a bad value"""
        name = self._field_for(key)
        if name is None:
            raise KeyError(key)
        setattr(self, name, value)

    def clockticks_levels(self) -> List[int]:
        return [getattr(self, f"clockticks_level_{i}") for i in range(NUM_CLOCKTICKS_LEVELS)]
