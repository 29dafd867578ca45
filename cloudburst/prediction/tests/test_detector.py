#!/usr/bin/env python3
# cloudburst/prediction/tests/test_detector.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

import unittest

from cloudburst.prediction import CloudburstDetector, PressureHistory, RainfallReading, pressure_drop_rate


class TestCloudburstDetector(unittest.TestCase):
    def setUp(self):
        self.detector = CloudburstDetector()

    def test_threshold_is_strict(self):
        """Exactly 100 mm/hr is not a cloudburst"""
        self.assertFalse(self.detector.detect(100.0).detected)
        self.assertTrue(self.detector.detect(100.01).detected)

    def test_confidence_from_pressure_drop(self):
        self.assertEqual(self.detector.detect(150.0, drop_rate=3.5).confidence, 'high')
        self.assertEqual(self.detector.detect(150.0, drop_rate=3.0).confidence, 'medium')
        self.assertEqual(self.detector.detect(150.0).confidence, 'medium')

    def test_not_detected_reports_values(self):
        detection = self.detector.detect(40.0, drop_rate=5.0)
        self.assertFalse(detection.detected)
        self.assertEqual(detection.confidence, 'low')
        self.assertEqual(detection.rainfall_rate, 40.0)
        self.assertEqual(detection.pressure_drop_rate, 5.0)

    def test_missing_rainfall_counts_as_zero(self):
        detection = self.detector.detect_reading(None)
        self.assertFalse(detection.detected)
        self.assertEqual(detection.rainfall_rate, 0.0)

    def test_detect_reading(self):
        self.assertTrue(self.detector.detect_reading(RainfallReading(rate=120.0), 4.0).detected)


class TestPressureHistory(unittest.TestCase):
    def test_drop_rate_function(self):
        self.assertEqual(pressure_drop_rate([1000.0], 1.0), 0.0)
        self.assertEqual(pressure_drop_rate([1000.0, 994.0], 0.0), 0.0)
        self.assertAlmostEqual(pressure_drop_rate([1000.0, 997.0, 994.0], 2.0), 3.0)
        self.assertAlmostEqual(pressure_drop_rate([990.0, 996.0], 1.0), -6.0)

    def test_history_drop_rate(self):
        history = PressureHistory()
        history.add(1005.0, 0.0)
        history.add(1002.0, 1800.0)
        history.add(1001.0, 3600.0)
        self.assertEqual(len(history), 3)
        self.assertAlmostEqual(history.drop_rate(), 4.0)

    def test_single_sample(self):
        history = PressureHistory()
        history.add(1000.0, 10.0)
        self.assertEqual(history.drop_rate(), 0.0)

    def test_window_trims_old_samples(self):
        history = PressureHistory(window_hours=1.0)
        history.add(1010.0, 0.0)
        history.add(1000.0, 3 * 3600.0)
        history.add(999.0, 3.5 * 3600.0)
        self.assertEqual(len(history), 2)
        self.assertAlmostEqual(history.drop_rate(), 2.0)

    def test_out_of_order_sample_dropped(self):
        history = PressureHistory()
        history.add(1000.0, 100.0)
        history.add(990.0, 50.0)
        self.assertEqual(len(history), 1)


if __name__ == '__main__':
    unittest.main()
