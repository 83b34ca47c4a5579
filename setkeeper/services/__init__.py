"""
SetKeeper services.

Checklist reconciliation: ordering, duplicate-safe import, bulk status
matching and display aggregation.
"""

from setkeeper.services.aggregator import (
    ChecklistGroup,
    ChecklistStats,
    ChecklistView,
    ParallelGroup,
    available_years,
    build_checklist_view,
    compute_stats,
    filter_cards,
    group_checklist,
    stats_from_counts,
)
from setkeeper.services.bulk_status import (
    BulkStatusPreview,
    apply_bulk_status,
    apply_selected_status,
    apply_selected_year,
    apply_status_locally,
    delete_selected,
    extract_identifiers,
    preview_bulk_status,
)
from setkeeper.services.csv_export import export_checklist_csv, export_filename
from setkeeper.services.guard import OperationGuard, operation_guard
from setkeeper.services.ordering import (
    compare_by_print_run,
    compare_card_numbers,
    sort_by_card_number,
    sort_rainbow,
)
from setkeeper.services.player_search import (
    PlayerSearchHit,
    SetFilters,
    SetSummary,
    collect_player_hits,
    filter_sets,
    player_search_term,
)
from setkeeper.services.reconciler import (
    DuplicateMatch,
    ImportResult,
    ReconcileResult,
    import_checklist,
    import_rainbow,
    insert_in_chunks,
    normalize_key,
    reconcile,
    reconcile_parallels,
)
from setkeeper.services.store import ChecklistStore

__all__ = [
    "BulkStatusPreview",
    "ChecklistGroup",
    "ChecklistStats",
    "ChecklistStore",
    "ChecklistView",
    "DuplicateMatch",
    "ImportResult",
    "OperationGuard",
    "ParallelGroup",
    "PlayerSearchHit",
    "ReconcileResult",
    "SetFilters",
    "SetSummary",
    "apply_bulk_status",
    "apply_selected_status",
    "apply_selected_year",
    "apply_status_locally",
    "available_years",
    "build_checklist_view",
    "collect_player_hits",
    "compare_by_print_run",
    "compare_card_numbers",
    "compute_stats",
    "delete_selected",
    "export_checklist_csv",
    "export_filename",
    "extract_identifiers",
    "filter_cards",
    "filter_sets",
    "group_checklist",
    "import_checklist",
    "import_rainbow",
    "insert_in_chunks",
    "normalize_key",
    "operation_guard",
    "player_search_term",
    "preview_bulk_status",
    "reconcile",
    "reconcile_parallels",
    "sort_by_card_number",
    "sort_rainbow",
    "stats_from_counts",
]
