"""Escrow Accounting — accrued settlement balances per seller.

Balances only grow through purchase credits and only shrink through a
withdrawal, which sets them to exactly zero before the payout is attempted.

The zeroing is deliberately NOT journaled: if the payout that follows
fails, the balance stays at zero and the seller's proceeds remain in escrow
with no ledger entry pointing at them. That is the price of making a second
(or re-entrant) withdrawal impossible, and it is visible to users.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from escrow_exchange.domain.exceptions import NoFundsError
from escrow_exchange.logging_config import get_logger

if TYPE_CHECKING:
    from escrow_exchange.services.journal import Journal

logger = get_logger(__name__)


class EscrowAccounting:
    """Owns the seller -> accrued balance mapping."""

    def __init__(self, journal: Journal) -> None:
        self._journal = journal
        self._balances: dict[str, int] = {}

    def balance_of(self, seller: str) -> int:
        return self._balances.get(seller, 0)

    def credit(self, seller: str, amount: int) -> None:
        """Add ``amount`` to ``seller``'s balance.

        Raises:
            ValueError: If ``amount`` is negative.
        """
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        self._balances[seller] = self.balance_of(seller) + amount
        self._journal.record(lambda: self._debit(seller, amount))
        logger.debug("escrow.credited", seller=seller, amount=amount)

    def withdraw(self, seller: str) -> int:
        """Zero ``seller``'s balance and return what it held.

        Raises:
            NoFundsError: If the balance is zero.
        """
        amount = self.balance_of(seller)
        if amount == 0:
            raise NoFundsError(seller)
        self._balances[seller] = 0
        return amount

    def _debit(self, seller: str, amount: int) -> None:
        self._balances[seller] = max(self.balance_of(seller) - amount, 0)
