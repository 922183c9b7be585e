"""
Tests for the thread-safe update mailbox.
"""

import threading

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rocket_engine.mailbox import UpdateMailbox


class TestUpdateMailbox:
    """Tests for posting and draining."""

    def test_empty_drain(self):
        assert UpdateMailbox().drain().is_empty

    def test_spot_slot_per_ticker(self):
        mailbox = UpdateMailbox()
        mailbox.post_spot('SPY', 600)
        mailbox.post_spot('SPY', 601.5)
        mailbox.post_spot('QQQ', 510)
        batch = mailbox.drain()
        assert batch.spot == {'SPY': 601.5, 'QQQ': 510.0}
        assert mailbox.drain().spot == {}

    def test_queues_preserve_order(self):
        mailbox = UpdateMailbox()
        mailbox.post_adjustment('rocket_a', strike=600.0)
        mailbox.post_adjustment('rocket_b', iv=0.3)
        mailbox.post_launch(type='call', strike=610.0)
        batch = mailbox.drain()
        assert batch.adjustments == [('rocket_a', {'strike': 600.0}), ('rocket_b', {'iv': 0.3})]
        assert batch.launches == [{'type': 'call', 'strike': 610.0}]
        assert mailbox.drain().is_empty

    def test_concurrent_producers(self):
        """Nothing is lost when several threads post at once."""
        mailbox = UpdateMailbox()

        def produce(n):
            for i in range(500):
                mailbox.post_adjustment(f"rocket_{n}", index=i)

        threads = [threading.Thread(target=produce, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()

        drained = []
        while any(t.is_alive() for t in threads):
            drained.extend(mailbox.drain().adjustments)
        for t in threads:
            t.join()
        drained.extend(mailbox.drain().adjustments)

        assert len(drained) == 2000
        for n in range(4):
            indices = [p['index'] for cid, p in drained if cid == f"rocket_{n}"]
            assert indices == list(range(500))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
