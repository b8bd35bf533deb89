"""In-process implementation of ContentStore.

Keeps artifacts in a dictionary keyed by (sign, period). Used when
STORE_BACKEND=memory and as the store in tests. Data lives only as long
as the process.
"""

from horoscope_cache.entities import CANONICAL_PERIODS, Artifact, Period, Sign
from horoscope_cache.exceptions import StoreConflict


class InMemoryContentRepository:
    """Dictionary-backed ContentStore.

    Each method runs without awaiting, so on a single event loop every
    call is atomic.
    """

    def __init__(self) -> None:
        self._records: dict[tuple[Sign, Period], Artifact] = {}

    async def lookup_one(self, sign: Sign, period: Period) -> Artifact | None:
        return self._records.get((sign, period))

    async def lookup_all_for_sign(self, sign: Sign) -> list[Artifact]:
        return [
            self._records[(sign, period)]
            for period in CANONICAL_PERIODS
            if (sign, period) in self._records
        ]

    async def insert_one(self, artifact: Artifact) -> None:
        if artifact.key in self._records:
            raise StoreConflict(f"Artifact already stored for {artifact.sign.name}:{artifact.period.name}")
        self._records[artifact.key] = artifact

    async def upsert_many(self, artifacts: list[Artifact]) -> None:
        self._records.update({artifact.key: artifact for artifact in artifacts})

    async def delete_one(self, sign: Sign, period: Period) -> bool:
        return self._records.pop((sign, period), None) is not None

    async def health_check(self) -> bool:
        return True

    def count_all(self) -> int:
        """Count stored artifacts."""
        return len(self._records)
