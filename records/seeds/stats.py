import logging
from collections import Counter
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class ProcessingStats:
    total: int = 0
    kept: int = 0
    discarded: int = 0
    reasons: Counter = field(default_factory=Counter)

    def discard(self, reason: str) -> None:
        self.discarded += 1
        self.reasons[reason] += 1
        logger.info('seed_discarded reason=%s', reason)

    def note(self, reason: str) -> None:
        """Count an event without discarding the record."""
        self.reasons[reason] += 1

    def lines(self, label: str) -> list:
        out = [f'  {label}: {self.kept}/{self.total} kept, {self.discarded} discarded']
        out.extend(f'    - {reason}: {count}' for reason, count in self.reasons.items())
        return out
