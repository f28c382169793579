# draftroom/seed.py
# ============================================================================
# Bootstrap du catalogue champions depuis Data Dragon
# • Exécuté une seule fois au démarrage, uniquement si la table est vide
# • Rôles par défaut : data/champion_roles.json
# • Accès base synchrones déportés dans un thread (boucle non bloquée)
# ============================================================================

from __future__ import annotations

import asyncio
import json
import logging
import pathlib
from functools import lru_cache
from typing import Dict, List

from draftroom.database import ROLES
from draftroom.ddragon.client import DataDragonClient
from draftroom.storage import Storage

logger = logging.getLogger(__name__)

DATA_DIR = pathlib.Path(__file__).parent / "data"
ROLES_FILE = DATA_DIR / "champion_roles.json"


@lru_cache(maxsize=1)
def default_roles() -> Dict[str, List[str]]:
    """
    Rôles par défaut par id Data Dragon.

    Returns:
        dict: {"Ahri": ["MID"], ...}; tokens inconnus ignorés
    """
    if not ROLES_FILE.exists():
        logger.warning(f"Fichier de rôles manquant: {ROLES_FILE}")
        return {}
    with open(ROLES_FILE, encoding="utf-8") as f:
        data = json.load(f)
    return {
        champ: [r for r in roles if r in ROLES]
        for champ, roles in data.items()
    }


async def bootstrap_champions(storage: Storage, client: DataDragonClient) -> int:
    """
    Seed the champion catalog when the store holds no champion yet.

    Returns:
        int: number of champions inserted (0 when skipped)
    """
    existing = await asyncio.to_thread(storage.count_champions)
    if existing > 0:
        logger.info("Database already has %d champions, skipping seed.", existing)
        return 0

    version = await client.get_latest_version()
    logger.info("Fetching champions from Data Dragon %s", version)
    champions = await client.get_champions(version)

    roles = default_roles()
    rows = [
        {
            "id": champ["id"],
            "name": champ["name"],
            "key": str(champ["key"]),
            "image_url": client.champion_icon_url(version, champ["image"]["full"]),
            "roles": roles.get(champ["id"], []),
        }
        for champ in champions
    ]
    inserted = await asyncio.to_thread(storage.insert_champions, rows)
    logger.info("Seeded %d champions", inserted)
    return inserted


async def run_bootstrap(storage: Storage) -> None:
    """Startup hook: a failed seed is logged and does not block the API."""
    try:
        async with DataDragonClient() as client:
            await bootstrap_champions(storage, client)
    except Exception as e:
        logger.error(f"Champion seed failed: {e}", exc_info=True)
