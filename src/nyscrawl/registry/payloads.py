from __future__ import annotations

from typing import Any, Dict

from ..config import RegistryConfig


def build_search_payload(
    term: str, config: RegistryConfig | None = None
) -> Dict[str, Any]:
    """Entity-name-contains search over all statuses, one fixed result window."""
    config = config or RegistryConfig()
    return {
        "searchValue": term,
        "searchByTypeIndicator": "EntityName",
        "searchExpressionIndicator": "Contains",
        "entityStatusIndicator": "AllStatuses",
        "entityTypeIndicator": list(config.entity_types),
        "listPaginationInfo": {
            "listStartRecord": config.list_start_record,
            "listEndRecord": config.list_end_record,
        },
    }


def build_detail_payload(dos_id: int | str) -> Dict[str, Any]:
    # SearchID always goes out as a JSON string of the integer id.
    return {
        "SearchID": str(int(dos_id)),
        "EntityName": "",
        "AssumedNameFlag": "false",
    }
