from setkeeper.models.card_record import (
    CardRecord,
    CardStatus,
    ParsedLineResult,
    ParsedParallel,
    SetType,
    StatusMatch,
)
from setkeeper.models.failure import (
    FailureDetail,
    FailureKind,
    KnownError,
    NotFoundError,
    OperationInFlightError,
    PersistenceError,
)

__all__ = [
    "CardRecord",
    "CardStatus",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "NotFoundError",
    "OperationInFlightError",
    "ParsedLineResult",
    "ParsedParallel",
    "PersistenceError",
    "SetType",
    "StatusMatch",
]
