from setkeeper.db.database import get_session, init_db
from setkeeper.db.operations import (
    SqlChecklistStore,
    count_statuses_by_set,
    create_set,
    get_set,
    get_set_or_fail,
    item_to_record,
    list_sets,
    record_to_item,
    search_player_cards,
    set_type_of,
)

__all__ = [
    "SqlChecklistStore",
    "count_statuses_by_set",
    "create_set",
    "get_session",
    "get_set",
    "get_set_or_fail",
    "init_db",
    "item_to_record",
    "list_sets",
    "record_to_item",
    "search_player_cards",
    "set_type_of",
]
