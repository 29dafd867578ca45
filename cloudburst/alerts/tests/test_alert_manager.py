#!/usr/bin/env python3
# cloudburst/alerts/tests/test_alert_manager.py
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).resolve().parent.parent.parent.parent
sys.path.append(str(project_root))

import unittest

from cloudburst.alerts import AlertManager, AlertNotFoundError, AlertSeverity, AlertType, severity_for
from cloudburst.geo import Coordinates
from cloudburst.prediction import AlertLevel, CloudburstDetection
from cloudburst.propagation import WindData
from cloudburst.sectors import Sector

NOW = 1_700_000_000.0


def make_sector(probability=0.0):
    return Sector(sector_id="sector_n1", node_id="n1", name="Kedar Valley", polygon=[],
                  centroid=Coordinates(30.7, 79.0), current_probability=probability, last_updated=NOW)


class TestSeverity(unittest.TestCase):
    def test_mapping(self):
        self.assertEqual(severity_for(AlertType.CLOUDBURST_DETECTED), AlertSeverity.CRITICAL)
        self.assertEqual(severity_for(AlertType.HIGH_PROBABILITY, AlertLevel.CRITICAL), AlertSeverity.CRITICAL)
        self.assertEqual(severity_for(AlertType.HIGH_PROBABILITY, AlertLevel.HIGH), AlertSeverity.WARNING)
        self.assertEqual(severity_for(AlertType.SYSTEM_WARNING), AlertSeverity.WARNING)
        self.assertEqual(severity_for(AlertType.AERIAL_DEPLOYED), AlertSeverity.INFO)
        self.assertEqual(severity_for(AlertType.AERIAL_RECALLED), AlertSeverity.INFO)


class TestAlertManager(unittest.TestCase):
    def setUp(self):
        self.manager = AlertManager()

    def test_create_and_get(self):
        alert = self.manager.create("sector_n1", AlertType.SYSTEM_WARNING, "Store offline", "Retrying", now=NOW)
        self.assertTrue(alert.alert_id.startswith("alert_"))
        self.assertIs(self.manager.get(alert.alert_id), alert)
        self.assertFalse(alert.acknowledged)
        self.assertEqual(alert.severity, AlertSeverity.WARNING)

    def test_unknown_alert(self):
        with self.assertRaises(AlertNotFoundError):
            self.manager.get("alert_missing")
        with self.assertRaises(AlertNotFoundError):
            self.manager.acknowledge("alert_missing", "ops")

    def test_acknowledge_once(self):
        """A second acknowledgement keeps the first acknowledger and time"""
        alert = self.manager.create("sector_n1", AlertType.SYSTEM_WARNING, "t", "m", now=NOW)
        first = self.manager.acknowledge(alert.alert_id, "alice", now=NOW + 10)
        second = self.manager.acknowledge(alert.alert_id, "bob", now=NOW + 20)
        self.assertTrue(first.acknowledged)
        self.assertEqual(second.acknowledged_by, "alice")
        self.assertEqual(second.acknowledged_at, NOW + 10)
        self.assertEqual(self.manager.unacknowledged_count(), 0)

    def test_list_newest_first_and_filters(self):
        old = self.manager.create("sector_a", AlertType.SYSTEM_WARNING, "old", "m", now=NOW)
        new = self.manager.create("sector_b", AlertType.SYSTEM_WARNING, "new", "m", now=NOW + 60)
        self.assertEqual([a.alert_id for a in self.manager.list_alerts()], [new.alert_id, old.alert_id])
        self.manager.acknowledge(new.alert_id, "ops", now=NOW + 61)
        self.assertEqual([a.alert_id for a in self.manager.list_alerts(unacknowledged_only=True)], [old.alert_id])
        self.assertEqual([a.alert_id for a in self.manager.list_alerts(sector_id="sector_b")], [new.alert_id])

    def test_detection_edge_only(self):
        sector = make_sector(90.0)
        detection = CloudburstDetection(detected=True, confidence='high', rainfall_rate=140.0, pressure_drop_rate=4.0)
        alert = self.manager.on_detection(sector, detection, previous_detected=False, now=NOW)
        self.assertEqual(alert.type, AlertType.CLOUDBURST_DETECTED)
        self.assertEqual(alert.severity, AlertSeverity.CRITICAL)
        self.assertIsNone(self.manager.on_detection(sector, detection, previous_detected=True, now=NOW))
        missed = CloudburstDetection(detected=False, confidence='low', rainfall_rate=20.0, pressure_drop_rate=0.0)
        self.assertIsNone(self.manager.on_detection(sector, missed, previous_detected=False, now=NOW))

    def test_level_change_upward_into_high(self):
        sector = make_sector(60.0)
        wind = WindData(speed=8.0, direction=120.0, timestamp=NOW)
        alert = self.manager.on_level_change(sector, AlertLevel.ELEVATED, wind=wind, now=NOW)
        self.assertEqual(alert.type, AlertType.HIGH_PROBABILITY)
        self.assertEqual(alert.severity, AlertSeverity.WARNING)
        self.assertEqual(alert.wind, wind)

    def test_level_change_ignored(self):
        self.assertIsNone(self.manager.on_level_change(make_sector(40.0), AlertLevel.NORMAL, now=NOW))
        self.assertIsNone(self.manager.on_level_change(make_sector(60.0), AlertLevel.CRITICAL, now=NOW))
        self.assertIsNone(self.manager.on_level_change(make_sector(60.0), AlertLevel.HIGH, now=NOW))

    def test_critical_escalation(self):
        alert = self.manager.on_level_change(make_sector(80.0), AlertLevel.HIGH, now=NOW)
        self.assertEqual(alert.severity, AlertSeverity.CRITICAL)

    def test_changed_tracking(self):
        alert = self.manager.create("sector_n1", AlertType.SYSTEM_WARNING, "t", "m", now=NOW)
        self.assertEqual([a.alert_id for a in self.manager.pop_changed()], [alert.alert_id])
        self.assertEqual(self.manager.pop_changed(), [])
        self.manager.acknowledge(alert.alert_id, "ops", now=NOW)
        changed = self.manager.pop_changed()
        self.assertTrue(changed[0].acknowledged)
        self.manager.mark_changed([alert.alert_id])
        self.assertEqual(len(self.manager.pop_changed()), 1)

    def test_history_evicts_acknowledged_first(self):
        manager = AlertManager(max_history=2)
        first = manager.create("s", AlertType.SYSTEM_WARNING, "1", "m", now=NOW)
        second = manager.create("s", AlertType.SYSTEM_WARNING, "2", "m", now=NOW + 1)
        manager.acknowledge(second.alert_id, "ops", now=NOW + 2)
        manager.create("s", AlertType.SYSTEM_WARNING, "3", "m", now=NOW + 3)
        self.assertEqual(len(manager), 2)
        self.assertIs(manager.get(first.alert_id), first)
        with self.assertRaises(AlertNotFoundError):
            manager.get(second.alert_id)

    def test_to_dict(self):
        alert = self.manager.create("sector_n1", AlertType.AERIAL_DEPLOYED, "t", "m", probability=55.555,
                                    aerial_status="deploying", now=0.0)
        data = alert.to_dict()
        self.assertEqual(data['type'], "aerial_deployed")
        self.assertEqual(data['probability'], 55.56)
        self.assertEqual(data['timestamp'], "1970-01-01T00:00:00.000Z")
        self.assertIsNone(data['acknowledgedAt'])


if __name__ == '__main__':
    unittest.main()
