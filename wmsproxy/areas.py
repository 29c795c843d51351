from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from wmsproxy.errors import ClientError


_NCEP_GEOSERVER = "https://opengeo.ncep.noaa.gov/geoserver"

DEFAULT_AREA = "conus"


@dataclass(frozen=True)
class AreaConfig:
    """One WMS endpoint + layer pair."""
    base_url: str
    layer_name: str


class Area(str, Enum):
    CONUS = "conus"
    ALASKA = "alaska"
    HAWAII = "hawaii"
    CARIB = "carib"
    GUAM = "guam"

    @classmethod
    def parse(cls, name: Optional[str]) -> "Area":
        """
        Resolve a query-string area name. Missing/empty -> conus; matching is
        case-insensitive. Unknown names raise ClientError("invalid area").
        """
        key = (name or DEFAULT_AREA).strip().lower()
        try:
            return cls(key)
        except ValueError:
            raise ClientError("invalid area") from None

    @property
    def config(self) -> AreaConfig:
        return AREA_CONFIGS[self]


def _radar_layer(area: str) -> AreaConfig:
    # Base reflectivity, quality controlled
    layer = f"{area}_bref_qcd"
    return AreaConfig(base_url=f"{_NCEP_GEOSERVER}/{area}/{layer}/ows", layer_name=layer)


AREA_CONFIGS: Dict[Area, AreaConfig] = {a: _radar_layer(a.value) for a in Area}

HAZARDS = AreaConfig(base_url=f"{_NCEP_GEOSERVER}/wwa/hazards/ows", layer_name="hazards")
