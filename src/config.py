from dataclasses import dataclass
from decimal import Context, Decimal, Inexact, InvalidOperation, Overflow
from enum import Enum

# Input amounts carry at most this many fractional digits.
AMOUNT_PLACES = 4
AMOUNT_QUANTUM = Decimal(1).scaleb(-AMOUNT_PLACES)

# Largest magnitude accepted for a single amount (signed 50.14 fixed point).
AMOUNT_MAX = Decimal(2**49) - AMOUNT_QUANTUM

# Balance arithmetic and rendering. Wide enough that sums of in-range amounts
# over every possible tx id stay exact; anything inexact raises.
AMOUNT_CONTEXT = Context(prec=40, traps=[Inexact, InvalidOperation, Overflow])

MAX_CLIENT_ID = 2**16 - 1
MAX_TX_ID = 2**32 - 1


class DisputePolicy(Enum):
    LENIENT = "lenient"
    STRICT = "strict"


class LockedAccountPolicy(Enum):
    PASS_THROUGH = "pass_through"
    REJECT = "reject"


@dataclass(frozen=True)
class EngineConfig:
    """
    Behavior switches for the ledger engine.

    The defaults replay the ledger without tracking open disputes and keep
    applying transactions to locked accounts.
    """

    dispute_policy: DisputePolicy = DisputePolicy.LENIENT
    locked_policy: LockedAccountPolicy = LockedAccountPolicy.PASS_THROUGH

    @property
    def strict_disputes(self) -> bool:
        return self.dispute_policy == DisputePolicy.STRICT

    @property
    def reject_locked(self) -> bool:
        return self.locked_policy == LockedAccountPolicy.REJECT
