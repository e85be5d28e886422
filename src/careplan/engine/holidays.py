"""
Holiday Calendar Providers
==========================
Sources of public holidays for a year. The engine never assumes "no
holidays" when a source fails: every failure surfaces as
HolidayProviderError so callers can withhold results.
"""
import threading
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from careplan.errors import HolidayProviderError, RecordValidationError
from careplan.models.holiday import Holiday, HolidayScope
from careplan.utils.logging_setup import get_logger
from careplan.utils.structured_logging import get_structured_logger

logger = get_logger("careplan.engine.holidays")
log = get_structured_logger("careplan.engine.holidays")


def _h(iso: str, name: str, scope: HolidayScope, region: Optional[str] = None, city: Optional[str] = None) -> Holiday:
    return Holiday(date=date.fromisoformat(iso), name=name, scope=scope, region=region, city=city)


_N, _R, _L = HolidayScope.NATIONAL, HolidayScope.REGIONAL, HolidayScope.LOCAL

# Spain (national), Catalonia (regional) and Mataró (local)
BUILTIN_HOLIDAYS: Tuple[Holiday, ...] = (
    _h("2024-01-01", "Año Nuevo", _N),
    _h("2024-01-06", "Epifanía del Señor", _N),
    _h("2024-03-29", "Viernes Santo", _N),
    _h("2024-05-01", "Fiesta del Trabajo", _N),
    _h("2024-08-15", "Asunción de la Virgen", _N),
    _h("2024-10-12", "Fiesta Nacional de España", _N),
    _h("2024-11-01", "Todos los Santos", _N),
    _h("2024-12-06", "Día de la Constitución", _N),
    _h("2024-12-08", "Inmaculada Concepción", _N),
    _h("2024-12-25", "Navidad", _N),
    _h("2025-01-01", "Año Nuevo", _N),
    _h("2025-01-06", "Epifanía del Señor", _N),
    _h("2025-04-18", "Viernes Santo", _N),
    _h("2025-05-01", "Fiesta del Trabajo", _N),
    _h("2025-08-15", "Asunción de la Virgen", _N),
    _h("2025-10-12", "Fiesta Nacional de España", _N),
    _h("2025-11-01", "Todos los Santos", _N),
    _h("2025-12-06", "Día de la Constitución", _N),
    _h("2025-12-08", "Inmaculada Concepción", _N),
    _h("2025-12-25", "Navidad", _N),
    _h("2024-04-01", "Lunes de Pascua", _R, region="Cataluña"),
    _h("2024-06-24", "San Juan", _R, region="Cataluña"),
    _h("2024-09-11", "Diada de Cataluña", _R, region="Cataluña"),
    _h("2024-12-26", "San Esteban", _R, region="Cataluña"),
    _h("2025-04-21", "Lunes de Pascua", _R, region="Cataluña"),
    _h("2025-06-24", "San Juan", _R, region="Cataluña"),
    _h("2025-09-11", "Diada de Cataluña", _R, region="Cataluña"),
    _h("2025-12-26", "San Esteban", _R, region="Cataluña"),
    _h("2024-02-26", "Lunes de Carnaval", _L, region="Cataluña", city="Mataró"),
    _h("2024-05-20", "Lunes de Pascua Granada", _L, region="Cataluña", city="Mataró"),
    _h("2024-07-22", "Santa María Magdalena (Patrona)", _L, region="Cataluña", city="Mataró"),
    _h("2024-07-23", "Fiesta Mayor de Mataró", _L, region="Cataluña", city="Mataró"),
    _h("2025-03-03", "Lunes de Carnaval", _L, region="Cataluña", city="Mataró"),
    _h("2025-06-09", "Lunes de Pascua Granada", _L, region="Cataluña", city="Mataró"),
    _h("2025-07-22", "Santa María Magdalena (Patrona)", _L, region="Cataluña", city="Mataró"),
    _h("2025-07-23", "Fiesta Mayor de Mataró", _L, region="Cataluña", city="Mataró"),
)


class HolidayCalendarProvider(ABC):
    """Interface for anything that can list the public holidays of a year."""

    @abstractmethod
    def get_holidays(self, year: int) -> List[Holiday]:
        """
        Get the active holidays of a year, ordered by date.

        Raises:
            HolidayProviderError: if the calendar cannot be obtained
        """
        pass

    def get_holidays_for_month(self, year: int, month: int) -> List[Holiday]:
        """Holidays of one month of the year."""
        return [h for h in self.get_holidays(year) if h.date.month == month]


class StaticHolidayProvider(HolidayCalendarProvider):
    """
    In-memory holiday list, optionally restricted to a region and city.

    National holidays always apply; regional ones apply when their region
    matches, local ones when their city (or, without a city, region) matches.
    """

    def __init__(
        self,
        holidays: Iterable[Holiday] = BUILTIN_HOLIDAYS,
        region: Optional[str] = None,
        city: Optional[str] = None,
    ):
        self.holidays = tuple(holidays)
        self.region = region
        self.city = city

    def _applies(self, holiday: Holiday) -> bool:
        if not holiday.is_active:
            return False
        if holiday.scope == HolidayScope.REGIONAL and self.region:
            return holiday.region == self.region
        if holiday.scope == HolidayScope.LOCAL:
            if self.city:
                return holiday.city == self.city
            if self.region:
                return holiday.region == self.region
        return True

    def get_holidays(self, year: int) -> List[Holiday]:
        return sorted(
            (h for h in self.holidays if h.date.year == year and self._applies(h)),
            key=lambda h: h.date,
        )


class CsvHolidayProvider(HolidayCalendarProvider):
    """Holidays read from a CSV file (date,name,type,region,city,is_active)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def get_holidays(self, year: int) -> List[Holiday]:
        from careplan.io.loaders import load_holidays

        try:
            holidays = load_holidays(self.path)
        except (OSError, ValueError, RecordValidationError) as e:
            raise HolidayProviderError(year, f"Cannot read holidays from {self.path}: {e}") from e
        return sorted(
            (h for h in holidays if h.date.year == year and h.is_active),
            key=lambda h: h.date,
        )


class CachingHolidayProvider(HolidayCalendarProvider):
    """Memoizes another provider per year. Failed fetches are not cached."""

    def __init__(self, inner: HolidayCalendarProvider):
        self.inner = inner
        self._cache: Dict[int, Tuple[Holiday, ...]] = {}
        self._lock = threading.Lock()

    def get_holidays(self, year: int) -> List[Holiday]:
        with self._lock:
            cached = self._cache.get(year)
        if cached is not None:
            return list(cached)

        holidays = tuple(fetch_holidays(self.inner, year))
        with self._lock:
            cached = self._cache.setdefault(year, holidays)
        return list(cached)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


def fetch_holidays(provider: HolidayCalendarProvider, year: int) -> List[Holiday]:
    """
    Get a year's holidays, turning any provider failure into HolidayProviderError.

    Args:
        provider: Holiday source
        year: Calendar year

    Returns:
        Holidays of the year

    Raises:
        HolidayProviderError: if the provider fails for any reason
    """
    try:
        holidays = provider.get_holidays(year)
    except HolidayProviderError:
        logger.error(f"Holiday calendar unavailable for {year}")
        raise
    except Exception as e:
        logger.error(f"Holiday provider {type(provider).__name__} failed for {year}: {e}")
        raise HolidayProviderError(year, f"{type(e).__name__}: {e}") from e

    log.info("holidays_fetched", year=year, count=len(holidays), provider=type(provider).__name__)
    return holidays
