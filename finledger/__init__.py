"""Balance calculation and multi-currency aggregation engine for a personal ledger."""

from finledger.utils.serialization import to_payload

__all__ = ["to_payload"]
