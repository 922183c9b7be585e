"""
Thread-safe hand-off between the spot poller (or any other producer thread)
and the single-threaded frame loop.
"""

from dataclasses import dataclass, field
import threading
from typing import Any, Dict, List, Tuple


@dataclass
class MailboxBatch:
    """Everything posted since the previous drain."""
    spot: Dict[str, float] = field(default_factory=dict)    # ticker -> latest price
    adjustments: List[Tuple[str, Dict[str, Any]]] = field(default_factory=list)
    launches: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.spot and not self.adjustments and not self.launches


class UpdateMailbox:
    """
    One spot slot per ticker plus FIFO queues of pending adjustments and
    launches. A newer spot overwrites an undrained one for the same ticker.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._spot: Dict[str, float] = {}
        self._adjustments: List[Tuple[str, Dict[str, Any]]] = []
        self._launches: List[Dict[str, Any]] = []

    def post_spot(self, ticker: str, price: float) -> None:
        with self._lock:
            self._spot[ticker] = float(price)

    def post_adjustment(self, contract_id: str, **params: Any) -> None:
        with self._lock:
            self._adjustments.append((contract_id, dict(params)))

    def post_launch(self, **params: Any) -> None:
        with self._lock:
            self._launches.append(dict(params))

    def drain(self) -> MailboxBatch:
        """Take and clear everything pending in one atomic step."""
        with self._lock:
            batch = MailboxBatch(
                spot=self._spot,
                adjustments=self._adjustments,
                launches=self._launches
            )
            self._spot = {}
            self._adjustments = []
            self._launches = []
        return batch
