# draftroom/storage.py
# ============================================================================
# Store SQLAlchemy : CRUD, vues dénormalisées, upserts évaluation/dispo
# ============================================================================
# • Une session par opération (with SessionLocal() as db).
# • Toute erreur SQLAlchemy → StoreError (loguée avec la stack, jamais
#   renvoyée telle quelle à l'appelant).
# • Upserts : UPDATE ciblé puis INSERT, la contrainte UNIQUE arbitre les
#   insertions concurrentes.
# ============================================================================

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from draftroom.database import (
    DRAFT_SLOTS, PATCH_CATEGORIES, RATING_FIELDS, RATING_MAX, RATING_MIN, ROLES, SYNERGY_TYPES,
    Champion, ChampionEvaluation, ChampionSynergy, Draft, DraftVariant,
    PatchNote, Player, PlayerAvailability, Scrim, SessionLocal, init_db,
)
from draftroom.errors import NotFoundError, StoreError, ValidationError
from draftroom.models.views import ChampionWithEvaluation, DraftWithDetails

log = logging.getLogger(__name__)

DRAFT_FIELDS = frozenset(
    ["name", "team_bans", "enemy_bans"] + [f"{slot}_champion_id" for slot in DRAFT_SLOTS]
)
SCRIM_FIELDS = frozenset(
    ["date", "opponent", "is_win", "score", "comments", "number_of_games", "compositions", "drafts"]
)
VARIANT_FIELDS = frozenset(
    ["name"] + [f"{role.lower()}_champion_id" for role in ROLES]
)


def check_ratings(values: Mapping[str, Any]) -> None:
    """Lève ValidationError si une note sort de [0, 3] (pas de clamp)."""
    bad = [
        {"field": name, "message": f"must be an integer between {RATING_MIN} and {RATING_MAX}"}
        for name, value in values.items()
        if value is not None and (
            isinstance(value, bool) or not isinstance(value, int)
            or not RATING_MIN <= value <= RATING_MAX
        )
    ]
    if bad:
        raise ValidationError("Rating out of range", bad)


def _check_choice(field: str, value: str, choices) -> None:
    if value not in choices:
        raise ValidationError(
            f"Invalid {field}",
            [{"field": field, "message": f"expected one of {', '.join(choices)}"}],
        )


def _pick(fields: Mapping[str, Any], allowed: Iterable[str]) -> Dict[str, Any]:
    """Whitelist explicite des colonnes modifiables."""
    allowed = set(allowed)
    return {k: v for k, v in fields.items() if k in allowed}


class Storage:
    """Entity store over a SQLAlchemy session factory."""

    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory

    # ───────────────────────────── Session helper ─────────────────────
    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        with self._session_factory() as db:
            try:
                yield db
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                log.exception("Store failure while trying to %s", action)
                raise StoreError(f"Failed to {action}") from e

    def create_schema(self) -> None:
        """Create missing tables on the engine behind this store."""
        init_db(bind=self._session_factory.kw["bind"])

    def ping(self) -> bool:
        """Simple round-trip used by the readiness check."""
        with self._session("ping the database") as db:
            db.execute(text("SELECT 1"))
        return True

    @staticmethod
    def _get_or_404(db: Session, model, key: str, entity: str):
        row = db.get(model, key)
        if row is None:
            raise NotFoundError(entity, key)
        return row

    # ───────────────────────────── Champions ──────────────────────────
    def count_champions(self) -> int:
        with self._session("count champions") as db:
            return db.scalar(select(func.count()).select_from(Champion))

    def get_champion_list(self) -> List[Champion]:
        with self._session("fetch champions") as db:
            return list(db.scalars(select(Champion).order_by(Champion.name)))

    def insert_champions(self, rows: Iterable[Mapping[str, Any]]) -> int:
        """Insertion groupée (seed) dans une seule transaction."""
        with self._session("seed champions") as db:
            champions = [Champion(**row) for row in rows]
            db.add_all(champions)
            return len(champions)

    def update_champion_roles(self, champion_id: str, roles: Sequence[str]) -> Champion:
        invalid = [r for r in roles if r not in ROLES]
        if invalid:
            raise ValidationError(
                "Invalid roles",
                [{"field": "roles", "message": f"invalid role(s): {', '.join(map(str, invalid))}"}],
            )
        # dict.fromkeys : dédoublonne en gardant l'ordre soumis
        unique_roles = list(dict.fromkeys(roles))
        with self._session("update champion roles") as db:
            champion = self._get_or_404(db, Champion, champion_id, "Champion")
            champion.roles = unique_roles
            return champion

    def upsert_evaluation(self, champion_id: str, ratings: Mapping[str, Optional[int]]) -> ChampionEvaluation:
        """
        Merge a partial rating update into the champion's evaluation row.

        Only the whitelisted rating fields present (and not None) in ``ratings``
        are written; the others keep their stored value, or 0 on first insert.
        Each write is a column-targeted UPDATE so two concurrent partial
        updates on different fields never drop each other.
        """
        fields = {k: v for k, v in _pick(ratings, RATING_FIELDS).items() if v is not None}
        check_ratings(fields)
        where = ChampionEvaluation.champion_id == champion_id

        with self._session("save evaluation") as db:
            self._get_or_404(db, Champion, champion_id, "Champion")

            if fields:
                matched = db.execute(update(ChampionEvaluation).where(where).values(**fields)).rowcount
            else:
                matched = db.scalar(select(func.count()).select_from(ChampionEvaluation).where(where))

            if not matched:
                try:
                    db.add(ChampionEvaluation(
                        champion_id=champion_id,
                        **{name: fields.get(name, 0) for name in RATING_FIELDS},
                    ))
                    db.flush()
                except IntegrityError:
                    # Insertion concurrente gagnante : on réapplique l'UPDATE
                    db.rollback()
                    log.info("Evaluation for %s created concurrently, merging instead", champion_id)
                    if fields:
                        db.execute(update(ChampionEvaluation).where(where).values(**fields))

            return db.scalars(select(ChampionEvaluation).where(where).execution_options(populate_existing=True)).one()

    # ───────────────────────────── Dénormalisation ────────────────────
    def list_champions_with_evaluations(self) -> List[ChampionWithEvaluation]:
        """Every champion paired with its evaluation, or None if never rated."""
        with self._session("fetch champions") as db:
            champions = db.scalars(select(Champion).order_by(Champion.name)).all()
            by_champion = {e.champion_id: e for e in db.scalars(select(ChampionEvaluation))}
        return [ChampionWithEvaluation(c, by_champion.get(c.id)) for c in champions]

    def get_champion_with_evaluation(self, champion_id: str) -> ChampionWithEvaluation:
        with self._session("fetch champion") as db:
            champion = self._get_or_404(db, Champion, champion_id, "Champion")
            evaluation = db.scalars(
                select(ChampionEvaluation).where(ChampionEvaluation.champion_id == champion_id)
            ).first()
        return ChampionWithEvaluation(champion, evaluation)

    def list_drafts_with_details(self) -> List[DraftWithDetails]:
        """
        Every draft with its variants and the champion behind each slot.

        A slot whose id is unset or no longer resolves is None; it never
        fails the whole draft.
        """
        with self._session("fetch drafts") as db:
            drafts = db.scalars(select(Draft).order_by(Draft.created_at, Draft.id)).all()
            variants = db.scalars(select(DraftVariant).order_by(DraftVariant.name)).all()
            champions = {c.id: c for c in db.scalars(select(Champion))}

        variants_by_draft: Dict[str, List[DraftVariant]] = {}
        for variant in variants:
            variants_by_draft.setdefault(variant.draft_id, []).append(variant)

        details = []
        for draft in drafts:
            slots = {}
            for slot in DRAFT_SLOTS:
                champion_id = getattr(draft, f"{slot}_champion_id")
                slots[slot] = champions.get(champion_id) if champion_id else None
            details.append(DraftWithDetails(draft, variants_by_draft.get(draft.id, []), slots))
        return details

    # ───────────────────────────── Drafts ─────────────────────────────
    def insert_draft(self, fields: Mapping[str, Any]) -> Draft:
        with self._session("create draft") as db:
            draft = Draft(**_pick(fields, DRAFT_FIELDS))
            db.add(draft)
            db.flush()
            return draft

    def update_draft(self, draft_id: str, fields: Mapping[str, Any]) -> Draft:
        with self._session("update draft") as db:
            draft = self._get_or_404(db, Draft, draft_id, "Draft")
            for name, value in _pick(fields, DRAFT_FIELDS).items():
                setattr(draft, name, value)
            return draft

    def delete_draft(self, draft_id: str) -> None:
        with self._session("delete draft") as db:
            db.delete(self._get_or_404(db, Draft, draft_id, "Draft"))
        log.info("Draft %s deleted (variants cascaded)", draft_id)

    def insert_variant(self, draft_id: str, fields: Mapping[str, Any]) -> DraftVariant:
        with self._session("create draft variant") as db:
            self._get_or_404(db, Draft, draft_id, "Draft")
            variant = DraftVariant(draft_id=draft_id, **_pick(fields, VARIANT_FIELDS))
            db.add(variant)
            db.flush()
            return variant

    def delete_variant(self, variant_id: str) -> None:
        with self._session("delete draft variant") as db:
            db.delete(self._get_or_404(db, DraftVariant, variant_id, "DraftVariant"))

    # ───────────────────────────── Scrims ─────────────────────────────
    def statistics_snapshot(self) -> Tuple[List[Scrim], List[Draft]]:
        """
        Scrims and drafts read inside one transaction, so the report never
        mixes two states of the store.
        """
        with self._session("read statistics snapshot") as db:
            if db.get_bind().dialect.name == "sqlite":
                # pysqlite n'ouvre pas de transaction pour un SELECT
                db.execute(text("BEGIN"))
            scrims = list(db.scalars(select(Scrim).order_by(Scrim.date, Scrim.id)))
            drafts = list(db.scalars(select(Draft).order_by(Draft.created_at, Draft.id)))
        return scrims, drafts

    def get_scrim_list(self) -> List[Scrim]:
        with self._session("fetch scrims") as db:
            return list(db.scalars(select(Scrim).order_by(Scrim.date, Scrim.id)))

    def insert_scrim(self, fields: Mapping[str, Any]) -> Scrim:
        values = {k: v for k, v in _pick(fields, SCRIM_FIELDS).items() if not (k == "date" and v is None)}
        with self._session("create scrim") as db:
            scrim = Scrim(**values)
            db.add(scrim)
            db.flush()
            return scrim

    def update_scrim(self, scrim_id: str, fields: Mapping[str, Any]) -> Scrim:
        with self._session("update scrim") as db:
            scrim = self._get_or_404(db, Scrim, scrim_id, "Scrim")
            for name, value in _pick(fields, SCRIM_FIELDS).items():
                setattr(scrim, name, value)
            return scrim

    def delete_scrim(self, scrim_id: str) -> None:
        with self._session("delete scrim") as db:
            db.delete(self._get_or_404(db, Scrim, scrim_id, "Scrim"))

    # ───────────────────────────── Players & dispo ────────────────────
    def get_player_list(self) -> List[Player]:
        with self._session("fetch players") as db:
            return list(db.scalars(select(Player).order_by(Player.name)))

    def insert_player(self, name: str, role: str) -> Player:
        with self._session("create player") as db:
            player = Player(name=name, role=role)
            db.add(player)
            db.flush()
            return player

    def delete_player(self, player_id: str) -> None:
        with self._session("delete player") as db:
            db.delete(self._get_or_404(db, Player, player_id, "Player"))
        log.info("Player %s deleted (availability cascaded)", player_id)

    def get_availability_list(self, player_id: Optional[str] = None) -> List[PlayerAvailability]:
        with self._session("fetch availability") as db:
            query = select(PlayerAvailability).order_by(PlayerAvailability.player_id, PlayerAvailability.day_of_week)
            if player_id:
                query = query.where(PlayerAvailability.player_id == player_id)
            return list(db.scalars(query))

    def upsert_availability(self, player_id: str, day_of_week: int, is_available: bool) -> PlayerAvailability:
        """One flag per (player, day): overwrite when present, insert otherwise."""
        if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
            raise ValidationError(
                "dayOfWeek must be between 0 and 6",
                [{"field": "dayOfWeek", "message": "must be an integer between 0 and 6"}],
            )
        where = (PlayerAvailability.player_id == player_id) & (PlayerAvailability.day_of_week == day_of_week)

        with self._session("save availability") as db:
            self._get_or_404(db, Player, player_id, "Player")

            matched = db.execute(
                update(PlayerAvailability).where(where).values(is_available=is_available)
            ).rowcount
            if not matched:
                try:
                    db.add(PlayerAvailability(
                        player_id=player_id, day_of_week=day_of_week, is_available=is_available,
                    ))
                    db.flush()
                except IntegrityError:
                    db.rollback()
                    log.info("Availability (%s, %d) created concurrently, overwriting", player_id, day_of_week)
                    db.execute(update(PlayerAvailability).where(where).values(is_available=is_available))

            return db.scalars(select(PlayerAvailability).where(where).execution_options(populate_existing=True)).one()

    # ───────────────────────────── Synergies ──────────────────────────
    def get_synergy_list(self, champion_id: Optional[str] = None) -> List[ChampionSynergy]:
        with self._session("fetch synergies") as db:
            query = select(ChampionSynergy).order_by(ChampionSynergy.champion1_id, ChampionSynergy.champion2_id)
            if champion_id:
                # paire non ordonnée : le champion peut être d'un côté ou de l'autre
                query = query.where(or_(
                    ChampionSynergy.champion1_id == champion_id,
                    ChampionSynergy.champion2_id == champion_id,
                ))
            return list(db.scalars(query))

    def insert_synergy(self, champion1_id: str, champion2_id: str, synergy_type: str,
                       rating: int = 0, notes: str = "") -> ChampionSynergy:
        _check_choice("synergyType", synergy_type, SYNERGY_TYPES)
        check_ratings({"rating": rating})
        with self._session("create synergy") as db:
            for champion_id in (champion1_id, champion2_id):
                self._get_or_404(db, Champion, champion_id, "Champion")
            synergy = ChampionSynergy(
                champion1_id=champion1_id, champion2_id=champion2_id,
                synergy_type=synergy_type, rating=rating, notes=notes,
            )
            db.add(synergy)
            db.flush()
            return synergy

    def delete_synergy(self, synergy_id: str) -> None:
        with self._session("delete synergy") as db:
            db.delete(self._get_or_404(db, ChampionSynergy, synergy_id, "ChampionSynergy"))

    # ───────────────────────────── Patch notes ────────────────────────
    def get_patch_note_list(self, category: Optional[str] = None) -> List[PatchNote]:
        with self._session("fetch patch notes") as db:
            query = select(PatchNote).order_by(PatchNote.created_at.desc(), PatchNote.id)
            if category:
                query = query.where(PatchNote.category == category)
            return list(db.scalars(query))

    def insert_patch_note(self, version: str, title: str, content: str, category: str) -> PatchNote:
        _check_choice("category", category, PATCH_CATEGORIES)
        with self._session("create patch note") as db:
            note = PatchNote(version=version, title=title, content=content, category=category)
            db.add(note)
            db.flush()
            return note

    def delete_patch_note(self, note_id: str) -> None:
        with self._session("delete patch note") as db:
            db.delete(self._get_or_404(db, PatchNote, note_id, "PatchNote"))
