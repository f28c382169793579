# draftroom/models/views.py
# ============================================================================
# Vues dénormalisées renvoyées par le store (aucune écriture en base)
# ============================================================================

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from draftroom.database import (
    DRAFT_SLOTS, Champion, ChampionEvaluation, Draft, DraftVariant,
)


@dataclass
class ChampionWithEvaluation:
    """A champion and its evaluation row; ``evaluation`` is None when never rated."""
    champion: Champion
    evaluation: Optional[ChampionEvaluation] = None


@dataclass
class DraftWithDetails:
    """A draft, its variants and the champion resolved for each of the 10 slots."""
    draft: Draft
    variants: List[DraftVariant] = field(default_factory=list)
    slots: Dict[str, Optional[Champion]] = field(default_factory=dict)

    def champion(self, slot: str) -> Optional[Champion]:
        """Champion in ``slot`` (e.g. "team_top"), None if unset or unresolvable."""
        if slot not in DRAFT_SLOTS:
            raise KeyError(slot)
        return self.slots.get(slot)
