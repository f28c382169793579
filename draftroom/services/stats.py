# draftroom/services/stats.py
# ============================================================================
# Statistiques scrims / drafts, recalculées à chaque appel (aucun cache)
# ============================================================================

from __future__ import annotations
from collections import Counter
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from draftroom.database import DRAFT_SLOTS

TOP_CHAMPIONS_LIMIT = 10


def pct(part: int, total: int) -> int:
    """Pourcentage arrondi à l'entier (demi vers le haut), 0 si total nul."""
    if total <= 0:
        return 0
    return int(part * 100 / total + 0.5)


def _day_key(value: Any) -> str:
    """Date ISO (YYYY-MM-DD) en UTC ; un datetime naïf est considéré UTC."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raise TypeError(f"Unsupported scrim date: {value!r}")


def draft_performance(scrims: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Bilan par draft : une occurrence par lien game→draft, pas une par scrim.

    Les draftId inconnus (draft supprimée) sont comptés quand même.
    """
    usage: Dict[str, Dict[str, int]] = {}
    for scrim in scrims:
        for link in scrim.drafts or []:
            draft_id = link.get("draftId") if isinstance(link, dict) else None
            if not draft_id:
                continue
            stats = usage.setdefault(draft_id, {"wins": 0, "losses": 0, "total": 0})
            stats["total"] += 1
            if scrim.is_win:
                stats["wins"] += 1
            else:
                stats["losses"] += 1

    rows = [
        {"draftId": draft_id, **stats, "winrate": pct(stats["wins"], stats["total"])}
        for draft_id, stats in usage.items()
    ]
    # sort() est stable : à égalité, ordre de première apparition
    rows.sort(key=lambda r: r["total"], reverse=True)
    return rows


def champion_usage(drafts: Iterable[Any], limit: Optional[int] = TOP_CHAMPIONS_LIMIT) -> List[Dict[str, Any]]:
    """Nombre d'apparitions de chaque champion sur les 10 slots de toutes les drafts."""
    counts: Counter = Counter()
    for draft in drafts:
        for slot in DRAFT_SLOTS:
            champion_id = getattr(draft, f"{slot}_champion_id", None)
            if champion_id:
                counts[champion_id] += 1
    # most_common() garde l'ordre d'insertion pour les ex-aequo
    ranked = counts.most_common(limit)
    return [{"championId": cid, "count": n} for cid, n in ranked]


def performance_over_time(scrims: Iterable[Any]) -> List[Dict[str, Any]]:
    """Victoires/défaites par jour calendaire, triées chronologiquement."""
    by_day: Dict[str, Dict[str, int]] = {}
    for scrim in scrims:
        bucket = by_day.setdefault(_day_key(scrim.date), {"victories": 0, "defeats": 0})
        if scrim.is_win:
            bucket["victories"] += 1
        else:
            bucket["defeats"] += 1

    return [
        {"date": day, **bucket, "total": bucket["victories"] + bucket["defeats"]}
        for day, bucket in sorted(by_day.items())
    ]


def compute_statistics(scrims: Sequence[Any], drafts: Sequence[Any]) -> Dict[str, Any]:
    """
    Rapport complet pour ``GET /api/scrims/statistics``.

    Args:
        scrims: Tous les scrims (attributs ``is_win``, ``date``, ``drafts``)
        drafts: Toutes les drafts (attributs ``<slot>_champion_id``)

    Returns:
        dict: totalScrims, wins, losses, winrate, draftPerformance,
              topChampions, performanceOverTime
    """
    total = len(scrims)
    wins = sum(1 for s in scrims if s.is_win)
    losses = total - wins

    return {
        "totalScrims": total,
        "wins": wins,
        "losses": losses,
        "winrate": pct(wins, total),
        "draftPerformance": draft_performance(scrims),
        "topChampions": champion_usage(drafts),
        "performanceOverTime": performance_over_time(scrims),
    }
