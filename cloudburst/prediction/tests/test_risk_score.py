#!/usr/bin/env python3
# cloudburst/prediction/tests/test_risk_score.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

import unittest

import pytest

from cloudburst.prediction import ManualObservation, RiskLevel, RiskScoring, risk_description


def pressure_history(*pressures):
    return [ManualObservation(temperature=20.0, pressure=p) for p in pressures]


class TestRiskScoring(unittest.TestCase):
    def test_defaults_score_low(self):
        assessment = RiskScoring.calculate(ManualObservation())
        self.assertEqual(assessment.probability, 2.0)
        self.assertEqual(assessment.risk_level, RiskLevel.LOW)
        self.assertFalse(assessment.will_occur)

    def test_storm_observation_is_critical(self):
        observation = ManualObservation(temperature=36.0, pressure=985.0, humidity=92.0,
                                        wind_speed=30.0, rainfall=60.0)
        assessment = RiskScoring.calculate(observation)
        self.assertEqual(assessment.probability, 93.0)
        self.assertEqual(assessment.risk_level, RiskLevel.CRITICAL)
        self.assertTrue(assessment.will_occur)
        self.assertEqual(assessment.factors, {'humidity': 30, 'pressure': 25, 'windSpeed': 20,
                                              'temperature': 8, 'rainfall': 10})

    def test_pressure_drop_from_history(self):
        observation = ManualObservation(temperature=28.0, pressure=1012.0, humidity=75.0,
                                        wind_speed=12.0, rainfall=20.0)
        history = pressure_history(1025.0, 1024.0, 1015.0, 1013.0, 1012.0)
        assessment = RiskScoring.calculate(observation, history)
        self.assertEqual(assessment.factors['pressure'], 20)
        self.assertEqual(assessment.probability, 44.0)
        self.assertEqual(assessment.risk_level, RiskLevel.MODERATE)
        self.assertFalse(assessment.will_occur)

    def test_short_history_has_no_trend(self):
        self.assertEqual(RiskScoring.pressure_score(1011.0, pressure_history(1030.0, 1011.0)), 5)
        self.assertEqual(RiskScoring.pressure_score(1020.0, pressure_history(1030.0, 1011.0)), 0)

    def test_temperature_spread(self):
        history = [ManualObservation(temperature=t) for t in (10.0, 22.0, 10.0, 22.0)]
        self.assertEqual(RiskScoring.temperature_score(36.0, history), 15)
        self.assertEqual(RiskScoring.temperature_score(31.0), 5)
        self.assertEqual(RiskScoring.temperature_score(25.0), 0)

    def test_to_dict(self):
        data = RiskScoring.calculate(ManualObservation(humidity=95.0, pressure=995.0)).to_dict()
        self.assertEqual(data['probability'], 50.0)
        self.assertEqual(data['riskLevel'], "high")
        self.assertEqual(data['riskColor'], "orange")
        self.assertEqual(data['description'], "High Risk")
        self.assertTrue(data['willOccur'])


@pytest.mark.parametrize("humidity,points", [
    (90, 30), (80, 25), (70, 15), (60, 8), (50, 2.0), (30, 0.0),
])
def test_humidity_points(humidity, points):
    assert RiskScoring.humidity_score(humidity) == pytest.approx(points)


@pytest.mark.parametrize("wind_speed,points", [(25, 20), (20, 15), (15, 10), (10, 5), (5, 1.5)])
def test_wind_points(wind_speed, points):
    assert RiskScoring.wind_score(wind_speed) == pytest.approx(points)


@pytest.mark.parametrize("level,text", [
    ("low", "Low Risk"), ("moderate", "Moderate Risk"), (RiskLevel.CRITICAL, "Critical Risk"), ("extreme", "Unknown"),
])
def test_risk_description(level, text):
    assert risk_description(level) == text


if __name__ == '__main__':
    unittest.main()
