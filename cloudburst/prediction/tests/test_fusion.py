#!/usr/bin/env python3
# cloudburst/prediction/tests/test_fusion.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

import math
import unittest

import pytest

from cloudburst.prediction import (
    AerialReading, AlertLevel, PredictionSource, ProbabilityFusionEngine, RainfallReading,
    WeatherReading, calculate_trend, combine_predictions, factor_breakdown, get_alert_level,
    humidity_factor, pressure_factor, pwv_factor, rainfall_factor
)

NOW = 1_700_000_000.0


class TestFactors(unittest.TestCase):
    def test_rainfall_factor(self):
        self.assertEqual(rainfall_factor(0), 0)
        self.assertEqual(rainfall_factor(50), 50)
        self.assertEqual(rainfall_factor(120), 100)

    def test_pressure_factor(self):
        self.assertAlmostEqual(pressure_factor(990), 46.0)
        self.assertEqual(pressure_factor(1013), 0)
        self.assertEqual(pressure_factor(1030), 0)
        self.assertEqual(pressure_factor(900), 100)

    def test_humidity_factor(self):
        self.assertEqual(humidity_factor(90), 90)
        self.assertEqual(humidity_factor(150), 100)

    def test_pwv_factor(self):
        self.assertEqual(pwv_factor(25), 50)
        self.assertEqual(pwv_factor(80), 100)


class TestFusionEngine(unittest.TestCase):
    def setUp(self):
        self.engine = ProbabilityFusionEngine()

    def test_ground_scenario(self):
        """990 hPa, 90 % humidity and 120 mm/hr rain -> 81.8 %, critical"""
        weather = WeatherReading(temperature=22.0, pressure=990.0, humidity=90.0, timestamp=NOW)
        rainfall = RainfallReading(rate=120.0, timestamp=NOW)
        result = self.engine.calculate(weather, rainfall, now=NOW)

        self.assertEqual(result.ground_factors.rainfall_factor, 100)
        self.assertAlmostEqual(result.ground_factors.pressure_factor, 46.0)
        self.assertEqual(result.ground_factors.humidity_factor, 90)
        self.assertAlmostEqual(result.combined_probability, 81.8)
        self.assertEqual(get_alert_level(result.combined_probability), AlertLevel.CRITICAL)
        self.assertEqual(result.source, PredictionSource.GROUND)
        self.assertAlmostEqual(result.breakdown['pressure'], 13.8)

    def test_fresh_ground_confidence(self):
        weather = WeatherReading(temperature=22.0, pressure=1000.0, humidity=70.0, timestamp=NOW - 60)
        rainfall = RainfallReading(rate=10.0, timestamp=NOW - 60)
        result = self.engine.calculate(weather, rainfall, now=NOW)
        self.assertAlmostEqual(result.confidence, 1.0)  # 0.4 + 0.4 + 0.2, clamped

    def test_stale_ground_confidence(self):
        weather = WeatherReading(temperature=22.0, pressure=1000.0, humidity=70.0, timestamp=NOW - 10 * 60)
        result = self.engine.calculate(weather, None, now=NOW)
        self.assertAlmostEqual(result.confidence, 0.3)   # 0.2 recent + 0.1 source
        old = WeatherReading(temperature=22.0, pressure=1000.0, humidity=70.0, timestamp=NOW - 3600)
        self.assertAlmostEqual(self.engine.calculate(old, None, now=NOW).confidence, 0.1)

    def test_no_data_is_unavailable(self):
        result = self.engine.calculate(None, None, None, now=NOW)
        self.assertEqual(result.source, PredictionSource.UNAVAILABLE)
        self.assertEqual(result.combined_probability, 0.0)
        self.assertEqual(result.confidence, 0.0)

    def test_rainfall_only_degrades_to_ground(self):
        result = self.engine.calculate(None, RainfallReading(rate=60.0, timestamp=NOW), now=NOW)
        self.assertEqual(result.source, PredictionSource.GROUND)
        self.assertAlmostEqual(result.combined_probability, 30.0)

    def test_ground_and_aerial(self):
        weather = WeatherReading(temperature=22.0, pressure=990.0, humidity=90.0, timestamp=NOW)
        rainfall = RainfallReading(rate=120.0, timestamp=NOW)
        aerial = AerialReading(altitude=3000.0, temperature=5.0, pressure=700.0, humidity=85.0, pwv=40.0)
        result = self.engine.calculate(weather, rainfall, aerial, now=NOW)

        # Aerial: pwv 80, inversion 80, humidity 85 -> 40 + 24 + 17 = 81
        self.assertAlmostEqual(result.aerial_probability, 81.0)
        self.assertAlmostEqual(result.combined_probability, 0.4 * 81.8 + 0.6 * 81.0)
        self.assertAlmostEqual(result.confidence, math.sqrt((1.0 ** 2 + 0.85 ** 2) / 2))
        self.assertEqual(result.source, PredictionSource.GROUND_AERIAL)

    def test_inversion_absent(self):
        aerial = AerialReading(altitude=3000.0, temperature=15.0, pressure=700.0, humidity=85.0, pwv=0.0)
        result = self.engine.calculate(None, None, aerial, now=NOW)
        self.assertEqual(result.aerial_factors.pressure_factor, 40)

    def test_combine_predictions(self):
        probability, confidence = combine_predictions(50.0, 0.6, 70.0, 0.8)
        self.assertAlmostEqual(probability, 62.0)
        self.assertAlmostEqual(confidence, math.sqrt((0.36 + 0.64) / 2))


class TestAlertLevelsAndTrend(unittest.TestCase):
    def test_level_boundaries(self):
        self.assertEqual(get_alert_level(24.99), AlertLevel.NORMAL)
        self.assertEqual(get_alert_level(25), AlertLevel.ELEVATED)
        self.assertEqual(get_alert_level(50), AlertLevel.HIGH)
        self.assertEqual(get_alert_level(74.9), AlertLevel.HIGH)
        self.assertEqual(get_alert_level(75), AlertLevel.CRITICAL)

    def test_level_rank(self):
        self.assertLess(AlertLevel.HIGH.rank, AlertLevel.CRITICAL.rank)

    def test_trend(self):
        self.assertEqual(calculate_trend([10]), 'stable')
        self.assertEqual(calculate_trend([10, 20, 30, 40]), 'increasing')
        self.assertEqual(calculate_trend([60, 50, 40]), 'decreasing')
        self.assertEqual(calculate_trend([50, 52, 51]), 'stable')

    def test_factor_breakdown(self):
        engine = ProbabilityFusionEngine()
        result = engine.calculate(WeatherReading(20.0, 1013.0, 50.0, NOW), None, now=NOW)
        self.assertEqual(factor_breakdown(result.ground_factors), {'rainfall': 0.0, 'pressure': 0.0, 'humidity': 10.0})


@pytest.mark.parametrize("pressure,humidity,rate", [
    (800.0, 100.0, 500.0),
    (1100.0, 0.0, 0.0),
    (950.0, -20.0, -5.0),
    (1013.0, 250.0, 99.9),
])
def test_probability_always_in_range(pressure, humidity, rate):
    engine = ProbabilityFusionEngine()
    aerial = AerialReading(altitude=1.0, temperature=0.0, pressure=pressure, humidity=humidity, pwv=rate)
    result = engine.calculate(WeatherReading(10.0, pressure, humidity, NOW), RainfallReading(rate, timestamp=NOW),
                              aerial, now=NOW)
    for factors in (result.ground_factors, result.aerial_factors):
        for value in (factors.rainfall_factor, factors.pressure_factor, factors.humidity_factor):
            assert 0.0 <= value <= 100.0
    assert 0.0 <= result.combined_probability <= 100.0
    assert 0.0 <= result.confidence <= 1.0


if __name__ == '__main__':
    unittest.main()
