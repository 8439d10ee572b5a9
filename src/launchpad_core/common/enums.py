from enum import Enum


class BondingCurveType(Enum):
    LINEAR = "LINEAR"

    @classmethod
    def from_str(cls, type_str):
        if type_str.upper() == BondingCurveType.LINEAR.name:
            return BondingCurveType.LINEAR
        else:
            raise NotImplementedError(f"No bonding curve type enum for {type_str}")

    def __hash__(self):
        return hash(self.value)

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class OrderSide(Enum):
    BUY = "BUY"
    SELL = "SELL"

    @classmethod
    def from_str(cls, side_str):
        if side_str.upper() == OrderSide.BUY.name:
            return OrderSide.BUY
        elif side_str.upper() == OrderSide.SELL.name:
            return OrderSide.SELL
        else:
            raise NotImplementedError(f"No order side enum for {side_str}")

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class GraduationStatus(Enum):
    BONDING = "BONDING"
    GRADUATED = "GRADUATED"

    @classmethod
    def from_str(cls, status_str: str) -> "GraduationStatus":
        """
        Convert a string to a GraduationStatus enum.
        :param status_str: str
        :return: GraduationStatus or NotImplementedError
        """
        if status_str.upper() == GraduationStatus.BONDING.name:
            return GraduationStatus.BONDING
        elif status_str.upper() == GraduationStatus.GRADUATED.name:
            return GraduationStatus.GRADUATED
        else:
            raise NotImplementedError(f"No graduation status enum for {status_str}")

    @classmethod
    def from_flag(cls, is_graduated: bool) -> "GraduationStatus":
        return GraduationStatus.GRADUATED if is_graduated else GraduationStatus.BONDING

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class QuoteSource(Enum):
    LOCAL_CURVE = "LOCAL_CURVE"
    LIVE_SERVICE = "LIVE_SERVICE"

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class QuoteError(Enum):
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INSUFFICIENT_SUPPLY = "INSUFFICIENT_SUPPLY"
    INSUFFICIENT_RESERVE = "INSUFFICIENT_RESERVE"
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class DataFlag(Enum):
    """Warnings carried on a successful result; none of them blocks rendering."""
    DEGRADED_SUPPLY_DATA = "DEGRADED_SUPPLY_DATA"
    ORACLE_UNAVAILABLE = "ORACLE_UNAVAILABLE"
    CACHED_PRICE = "CACHED_PRICE"
    POOL_UNAVAILABLE = "POOL_UNAVAILABLE"

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class SupplySource(Enum):
    LEDGER = "LEDGER"
    CHAIN = "CHAIN"
    FALLBACK = "FALLBACK"

    def __str__(self):
        return self.name

    def __repr__(self):
        return self.__str__()


class TimeWindow(Enum):
    ONE_HOUR = "1h"
    ONE_DAY = "24h"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"

    @classmethod
    def from_str(cls, window_str):
        for window in TimeWindow:
            if window_str.lower() == window.value:
                return window
        raise NotImplementedError(f"No time window enum for {window_str}")

    @property
    def milliseconds(self) -> int:
        hours = {
            TimeWindow.ONE_HOUR: 1,
            TimeWindow.ONE_DAY: 24,
            TimeWindow.SEVEN_DAYS: 7 * 24,
            TimeWindow.THIRTY_DAYS: 30 * 24,
        }[self]
        return hours * 60 * 60 * 1000

    def __str__(self):
        return self.value

    def __repr__(self):
        return self.__str__()
