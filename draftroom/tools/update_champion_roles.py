#!/usr/bin/env python3
"""
tools/update_champion_roles.py
Réapplique les rôles par défaut (data/champion_roles.json) aux champions
déjà présents en base. Les champions absents sont listés, jamais créés.

Usage :
  python -m draftroom.tools.update_champion_roles
"""
import sys
from typing import Dict, List, Optional, Tuple

from draftroom.config import settings
from draftroom.errors import DraftroomError
from draftroom.logging_config import get_logger, setup_logging
from draftroom.seed import default_roles
from draftroom.storage import Storage

log = get_logger(__name__)


def apply_default_roles(storage: Storage,
                        roles: Optional[Dict[str, List[str]]] = None) -> Tuple[List[str], List[str]]:
    """
    Returns:
        (updated, not_found): champion ids in role-map order
    """
    roles = default_roles() if roles is None else roles
    known = {c.id for c in storage.get_champion_list()}
    updated, not_found = [], []
    for champion_id, champion_roles in roles.items():
        if champion_id not in known:
            not_found.append(champion_id)
            log.info("Champion not found: %s", champion_id)
            continue
        storage.update_champion_roles(champion_id, champion_roles)
        updated.append(champion_id)
        log.debug("Updated %s: %s", champion_id, ", ".join(champion_roles))

    unmapped = sorted(known - roles.keys())
    if unmapped:
        log.warning("No default roles for: %s", ", ".join(unmapped))
    return updated, not_found


def main() -> int:
    setup_logging(level=settings.LOG_LEVEL)
    storage = Storage()
    storage.create_schema()
    try:
        updated, not_found = apply_default_roles(storage)
    except DraftroomError as e:
        log.error(f"Role update aborted: {e.message}")
        return 1

    log.info("=== Summary ===")
    log.info("Total champions in role map: %d", len(updated) + len(not_found))
    log.info("Successfully updated: %d", len(updated))
    log.info("Not found: %d", len(not_found))
    if not_found:
        log.info("Champions not found in database: %s", ", ".join(not_found))
    return 0


if __name__ == "__main__":
    sys.exit(main())
