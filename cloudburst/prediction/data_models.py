# cloudburst/prediction/data_models.py
"""
Sensor readings consumed by the fusion engine and the results it produces.
Reading timestamps are epoch seconds; None means the age is unknown.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class PredictionSource(str, Enum):
    GROUND = "ground"
    GROUND_AERIAL = "ground+aerial"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class WeatherReading:
    temperature: float      # Celsius
    pressure: float         # hPa
    humidity: float         # percent, 0-100
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class RainfallReading:
    rate: float             # mm/hr
    cumulative: float = 0.0  # mm
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class AerialReading:
    altitude: float         # meters
    temperature: float
    pressure: float
    humidity: float
    pwv: float              # precipitable water vapour, mm
    timestamp: Optional[float] = None


@dataclass(frozen=True)
class ProbabilityFactors:
    """Each factor is normalised to [0, 100]."""
    rainfall_factor: float = 0.0
    pressure_factor: float = 0.0
    humidity_factor: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            'rainfallFactor': self.rainfall_factor,
            'pressureFactor': self.pressure_factor,
            'humidityFactor': self.humidity_factor
        }


@dataclass
class ProbabilityCalculation:
    """Outcome of one fusion run for a sector."""
    base_probability: float
    ground_factors: ProbabilityFactors
    combined_probability: float
    confidence: float
    source: PredictionSource
    aerial_factors: Optional[ProbabilityFactors] = None
    aerial_probability: Optional[float] = None
    breakdown: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class CloudburstDetection:
    detected: bool
    confidence: str          # 'high' | 'medium' | 'low'
    rainfall_rate: float
    pressure_drop_rate: float
