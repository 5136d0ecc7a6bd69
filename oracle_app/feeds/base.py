"""Abstract price source consumed by the poll scheduler."""

from abc import ABC, abstractmethod
from collections.abc import Mapping


class PriceSource(ABC):
    """
    Supplier of current prices, keyed by instrument identifier.

    Prices are fixed-point ints with 18 decimals, the encoding oracle feeds
    publish. Implementations may fail transiently by raising any exception;
    the scheduler isolates such failures per instrument.
    """

    @abstractmethod
    async def fetch_price(self, instrument_id: str) -> int:
        """
        Fetch the current price for one instrument.

        Args:
            instrument_id: Registered instrument identifier

        Returns:
            Fixed-point price; zero means the feed has no data
        """
        pass

    @abstractmethod
    async def fetch_all_prices(self) -> Mapping[str, int]:
        """
        Fetch current prices for every instrument the source knows.

        A raised exception means no instrument was updated. Instruments
        missing from the mapping count as failed for that tick.
        """
        pass
