"""
Shared base models and enums for the Disaster Alert API
"""

from pydantic import AliasGenerator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from enum import Enum


# ============= Enums =============

class DisasterType(str, Enum):
    """Disaster types the system predicts and alerts on"""
    FLOOD = "flood"
    CYCLONE = "cyclone"
    HEAVY_RAINFALL = "heavy_rainfall"
    EARTHQUAKE = "earthquake"
    WILDFIRE = "wildfire"


class SeverityLevel(str, Enum):
    """Alert severity, ordered low < moderate < high < critical"""
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


HIGH_RISK_SEVERITIES = frozenset({SeverityLevel.HIGH.value, SeverityLevel.CRITICAL.value})


# ============= Base Model =============

class ApiModel(BaseModel):
    """Snake_case on the wire; camelCase aliases accepted on input"""
    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )


# ============= Helpers =============

def enum_value(value):
    """Plain value of an enum member, or the value itself"""
    return value.value if isinstance(value, Enum) else value
