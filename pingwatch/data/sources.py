"""
Sample source port.

The statistics and forecast engines never talk to storage directly; they ask
a SampleSource for every sample newer than a cutoff. Hosts wire this to their
database, TSDB or an in-memory store.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from .schema import Sample


class SampleSource(ABC):
    """
    Abstract interface for time-windowed sample lookups.

    Implementations must:
    - return samples with ``timestamp > since`` only (strictly newer)
    - order them by ascending timestamp
    - raise StorageError when the backing store fails
    """

    @abstractmethod
    def samples_since(self, since: datetime) -> List[Sample]:
        """
        Fetch samples recorded after a cutoff.

        Args:
            since: Exclusive lower bound on sample timestamps

        Returns:
            Samples ordered by ascending timestamp
        """
        ...
