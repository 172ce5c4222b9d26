from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...rates.model import RateRule


class PayStrategy(ABC):
    """Strategy Pattern: encapsulate how hours turn into pay."""

    @abstractmethod
    def pay(self, hours: Decimal, rule: RateRule) -> Decimal:
        raise NotImplementedError
