"""Application services — ledger state and use case orchestration."""

from escrow_exchange.services.asset_gateway import SimulatedAssetGateway, TransferRecord
from escrow_exchange.services.escrow_accounting import EscrowAccounting
from escrow_exchange.services.journal import Journal
from escrow_exchange.services.listing_ledger import ListingLedger
from escrow_exchange.services.marketplace import Marketplace
from escrow_exchange.services.notification_log import NotificationLog
from escrow_exchange.services.operation_lock import OperationLock

__all__ = [
    "EscrowAccounting",
    "Journal",
    "ListingLedger",
    "Marketplace",
    "NotificationLog",
    "OperationLock",
    "SimulatedAssetGateway",
    "TransferRecord",
]
