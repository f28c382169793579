# draftroom/schemas.py
# ============================================================================
# Modèles pydantic : corps de requête (validation) + réponses JSON camelCase
# ============================================================================

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictBool, field_validator, model_validator
from pydantic.alias_generators import to_camel

from draftroom.database import DRAFT_SLOTS, RATING_FIELDS, RATING_MAX, RATING_MIN, ROLES
from draftroom.models.views import ChampionWithEvaluation, DraftWithDetails

Rating = Annotated[int, Field(strict=True, ge=RATING_MIN, le=RATING_MAX)]
DayOfWeek = Annotated[int, Field(strict=True, ge=0, le=6)]
SynergyType = Literal["positive", "negative"]
PatchCategory = Literal["champion", "item", "system", "meta"]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _not_blank(value: Optional[str]) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError("must not be empty")
    return value


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # stocké en UTC naïf : SQLite ignore le fuseau
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _with_utc(value: datetime) -> datetime:
    # relu naïf depuis la base, renvoyé avec son offset
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


NonBlank = Annotated[str, AfterValidator(_not_blank)]
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]
UtcOut = Annotated[datetime, AfterValidator(_with_utc)]


# ───────────────────────────── Erreurs ────────────────────────────────
class ErrorBody(BaseModel):
    code: str
    message: str
    details: Dict[str, Any] = {}


class ErrorResponse(BaseModel):
    error: ErrorBody


# ───────────────────────────── Champions ──────────────────────────────
class EvaluationOut(CamelModel):
    id: str
    champion_id: str
    prio_lane: int
    strongside: int
    weakside: int
    engage: int
    peeling: int
    split: int
    hypercarry: int
    controle: int


class ChampionOut(CamelModel):
    id: str
    name: str
    image_url: str
    key: str
    roles: List[str] = []


class ChampionWithEvaluationOut(ChampionOut):
    evaluation: Optional[EvaluationOut] = None

    @classmethod
    def from_view(cls, view: ChampionWithEvaluation) -> "ChampionWithEvaluationOut":
        out = cls.model_validate(view.champion)
        if view.evaluation is not None:
            out.evaluation = EvaluationOut.model_validate(view.evaluation)
        return out


class RolesUpdate(CamelModel):
    roles: List[str]

    @field_validator("roles")
    @classmethod
    def check_roles(cls, roles: List[str]) -> List[str]:
        invalid = [r for r in roles if r not in ROLES]
        if invalid:
            raise ValueError(f"invalid role(s): {', '.join(invalid)}; expected a subset of {', '.join(ROLES)}")
        return roles


class EvaluationUpdate(CamelModel):
    """Partial rating update: only the eight named fields are ever read."""

    champion_id: NonBlank
    prio_lane: Optional[Rating] = None
    strongside: Optional[Rating] = None
    weakside: Optional[Rating] = None
    engage: Optional[Rating] = None
    peeling: Optional[Rating] = None
    split: Optional[Rating] = None
    hypercarry: Optional[Rating] = None
    controle: Optional[Rating] = None

    def ratings(self) -> Dict[str, int]:
        """Fields actually supplied by the caller (None means omitted)."""
        return {name: getattr(self, name) for name in RATING_FIELDS if getattr(self, name) is not None}


# ───────────────────────────── Drafts ─────────────────────────────────
class DraftSlots(CamelModel):
    team_top_champion_id: Optional[str] = None
    team_jgl_champion_id: Optional[str] = None
    team_mid_champion_id: Optional[str] = None
    team_adc_champion_id: Optional[str] = None
    team_sup_champion_id: Optional[str] = None
    enemy_top_champion_id: Optional[str] = None
    enemy_jgl_champion_id: Optional[str] = None
    enemy_mid_champion_id: Optional[str] = None
    enemy_adc_champion_id: Optional[str] = None
    enemy_sup_champion_id: Optional[str] = None


class DraftCreate(DraftSlots):
    name: NonBlank
    team_bans: List[str] = []
    enemy_bans: List[str] = []


class DraftUpdate(DraftSlots):
    name: Optional[NonBlank] = None
    team_bans: Optional[List[str]] = None
    enemy_bans: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_not_null(self):
        # Les listes de bans sont NOT NULL : un null explicite est refusé
        for name in ("name", "team_bans", "enemy_bans"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


class VariantCreate(CamelModel):
    name: NonBlank
    top_champion_id: Optional[str] = None
    jgl_champion_id: Optional[str] = None
    mid_champion_id: Optional[str] = None
    adc_champion_id: Optional[str] = None
    sup_champion_id: Optional[str] = None


class VariantOut(CamelModel):
    id: str
    draft_id: str
    name: str
    top_champion_id: Optional[str] = None
    jgl_champion_id: Optional[str] = None
    mid_champion_id: Optional[str] = None
    adc_champion_id: Optional[str] = None
    sup_champion_id: Optional[str] = None


class DraftOut(DraftSlots):
    id: str
    name: str
    created_at: UtcOut
    team_bans: List[str] = []
    enemy_bans: List[str] = []


class DraftWithDetailsOut(DraftOut):
    variants: List[VariantOut] = []
    team_top_champion: Optional[ChampionOut] = None
    team_jgl_champion: Optional[ChampionOut] = None
    team_mid_champion: Optional[ChampionOut] = None
    team_adc_champion: Optional[ChampionOut] = None
    team_sup_champion: Optional[ChampionOut] = None
    enemy_top_champion: Optional[ChampionOut] = None
    enemy_jgl_champion: Optional[ChampionOut] = None
    enemy_mid_champion: Optional[ChampionOut] = None
    enemy_adc_champion: Optional[ChampionOut] = None
    enemy_sup_champion: Optional[ChampionOut] = None

    @classmethod
    def from_view(cls, view: DraftWithDetails) -> "DraftWithDetailsOut":
        # DraftOut d'abord : ne jamais toucher draft.variants (instance détachée)
        base = DraftOut.model_validate(view.draft).model_dump()
        champions = {
            f"{slot}_champion": ChampionOut.model_validate(view.champion(slot))
            for slot in DRAFT_SLOTS
            if view.champion(slot) is not None
        }
        return cls(
            **base,
            variants=[VariantOut.model_validate(v) for v in view.variants],
            **champions,
        )


# ───────────────────────────── Scrims ─────────────────────────────────
class Composition(CamelModel):
    """Champions joués sur une game, par rôle."""
    top: Optional[str] = None
    jgl: Optional[str] = None
    mid: Optional[str] = None
    adc: Optional[str] = None
    sup: Optional[str] = None


class GameDraft(CamelModel):
    game_number: Annotated[int, Field(strict=True, ge=1)]
    draft_id: str = Field(min_length=1)


class ScrimFields(CamelModel):
    date: Optional[UtcDatetime] = None
    comments: Optional[str] = None
    number_of_games: Optional[Annotated[int, Field(strict=True, ge=1)]] = None
    compositions: Optional[List[Composition]] = None
    drafts: Optional[List[GameDraft]] = None

    def to_store(self) -> Dict[str, Any]:
        """Champs fournis, JSON imbriqués sérialisés en camelCase."""
        values = self.model_dump(exclude_unset=True)
        if "compositions" in values and self.compositions is not None:
            values["compositions"] = [c.model_dump(exclude_none=True) for c in self.compositions]
        if "drafts" in values and self.drafts is not None:
            values["drafts"] = [d.model_dump(by_alias=True) for d in self.drafts]
        return values


class ScrimCreate(ScrimFields):
    opponent: NonBlank
    is_win: StrictBool
    score: NonBlank
    comments: str = ""


class ScrimUpdate(ScrimFields):
    opponent: Optional[NonBlank] = None
    is_win: Optional[StrictBool] = None
    score: Optional[NonBlank] = None

    @model_validator(mode="after")
    def check_not_null(self):
        for name in ("date", "opponent", "is_win", "score", "comments"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


class ScrimOut(CamelModel):
    id: str
    date: UtcOut
    opponent: str
    is_win: bool
    score: str
    comments: str
    number_of_games: Optional[int] = None
    compositions: Optional[List[Dict[str, str]]] = None
    drafts: Optional[List[Dict[str, Any]]] = None


class DraftPerformanceOut(CamelModel):
    draft_id: str
    wins: int
    losses: int
    total: int
    winrate: int


class ChampionUsageOut(CamelModel):
    champion_id: str
    count: int


class DayPerformanceOut(CamelModel):
    date: str
    victories: int
    defeats: int
    total: int


class StatisticsOut(CamelModel):
    total_scrims: int
    wins: int
    losses: int
    winrate: int
    draft_performance: List[DraftPerformanceOut]
    top_champions: List[ChampionUsageOut]
    performance_over_time: List[DayPerformanceOut]


# ───────────────────────────── Roster ─────────────────────────────────
class PlayerCreate(CamelModel):
    name: NonBlank
    role: NonBlank


class PlayerOut(CamelModel):
    id: str
    name: str
    role: str


class AvailabilityUpsert(CamelModel):
    player_id: NonBlank
    day_of_week: DayOfWeek
    is_available: StrictBool = False


class AvailabilityOut(CamelModel):
    id: str
    player_id: str
    day_of_week: int
    is_available: bool


# ───────────────────────────── Synergies ──────────────────────────────
class SynergyCreate(CamelModel):
    champion1_id: NonBlank
    champion2_id: NonBlank
    synergy_type: SynergyType
    rating: Rating = 0
    notes: str = ""

    @model_validator(mode="after")
    def check_distinct_pair(self):
        if self.champion1_id == self.champion2_id:
            raise ValueError("champion1Id and champion2Id must differ")
        return self


class SynergyOut(CamelModel):
    id: str
    champion1_id: str
    champion2_id: str
    synergy_type: str
    rating: int
    notes: str


# ───────────────────────────── Patch notes ────────────────────────────
class PatchNoteCreate(CamelModel):
    version: NonBlank
    title: NonBlank
    content: str
    category: PatchCategory


class PatchNoteOut(CamelModel):
    id: str
    version: str
    title: str
    content: str
    category: str
    created_at: UtcOut
