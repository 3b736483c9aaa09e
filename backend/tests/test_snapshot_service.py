import unittest
from flask import Flask

from driverpunch.services.snapshot_service import SnapshotHub


class SnapshotHubTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = Flask(__name__)
        cls.app.config.update(TESTING=True)
        cls.ctx = cls.app.app_context()
        cls.ctx.push()

    @classmethod
    def tearDownClass(cls):
        cls.ctx.pop()

    def setUp(self):
        self.rows = [{"id": 1}]
        self.loads = 0
        self.hub = SnapshotHub()
        self.hub.register_loader("things", self._load)

    def _load(self):
        self.loads += 1
        return list(self.rows)

    def test_snapshot_uses_loader(self):
        self.assertEqual(self.hub.snapshot("things"), [{"id": 1}])

    def test_unknown_topic(self):
        with self.assertRaises(KeyError):
            self.hub.snapshot("nope")
        with self.assertRaises(KeyError):
            self.hub.subscribe("nope", lambda rows: None)

    def test_publish_delivers_full_list(self):
        received = []
        self.hub.subscribe("things", received.append)

        self.rows.append({"id": 2})
        delivered = self.hub.publish("things")

        self.assertEqual(delivered, 1)
        self.assertEqual(received, [[{"id": 1}, {"id": 2}]])

    def test_publish_without_subscribers_skips_load(self):
        self.assertEqual(self.hub.publish("things"), 0)
        self.assertEqual(self.loads, 0)

    def test_snapshot_loaded_once_per_publish(self):
        self.hub.subscribe("things", lambda rows: None)
        self.hub.subscribe("things", lambda rows: None)
        self.hub.publish("things")
        self.assertEqual(self.loads, 1)

    def test_unsubscribe(self):
        received = []
        unsubscribe = self.hub.subscribe("things", received.append)
        self.assertEqual(self.hub.subscriber_count("things"), 1)

        unsubscribe()
        unsubscribe()
        self.hub.publish("things")

        self.assertEqual(self.hub.subscriber_count("things"), 0)
        self.assertEqual(received, [])

    def test_failing_subscriber_does_not_block_others(self):
        received = []

        def broken(rows):
            raise RuntimeError("boom")

        self.hub.subscribe("things", broken)
        self.hub.subscribe("things", received.append)

        with self.assertLogs(self.app.logger, level="ERROR"):
            delivered = self.hub.publish("things")

        self.assertEqual(delivered, 1)
        self.assertEqual(len(received), 1)


if __name__ == "__main__":
    unittest.main()
