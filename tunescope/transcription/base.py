"""Base classes for per-tick spectrum processing."""

from abc import ABC, abstractmethod
from typing import Any

from ..core import Spectrum


class SpectrumProcessor(ABC):
    """Abstract base class for anything fed one spectrum per analysis tick."""

    @abstractmethod
    def process(self, spectrum: Spectrum, now_ms: float) -> Any:
        """
        Analyse one tick.

        Args:
            spectrum: Magnitude spectrum for this tick
            now_ms: Caller's clock in milliseconds

        Returns:
            Per-tick reading
        """
        pass
