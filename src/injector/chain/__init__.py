"""External ledger and recipient interfaces, plus a local in-memory chain."""

from injector.chain.base import WEEK, AssetLedger, Chain, RewardData, RewardGauge
from injector.chain.local import LocalChain, LocalGauge, LocalToken

__all__ = [
    "WEEK",
    "AssetLedger",
    "Chain",
    "LocalChain",
    "LocalGauge",
    "LocalToken",
    "RewardData",
    "RewardGauge",
]
