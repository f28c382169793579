# database.py – SQLAlchemy setup + modèles (champions, drafts, scrims, roster)

import uuid
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import (
    create_engine, event, Column, String, Text, Integer, Boolean, DateTime, JSON,
    ForeignKey, UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker
from sqlalchemy.pool import StaticPool

from draftroom.config import settings


# ────────────────────────────── Constantes ─────────────────────────────────
ROLES = ("TOP", "JGL", "MID", "ADC", "SUP")

RATING_FIELDS = (
    "prio_lane", "strongside", "weakside", "engage",
    "peeling", "split", "hypercarry", "controle",
)
RATING_MIN, RATING_MAX = 0, 3

# 5 slots alliés + 5 slots ennemis ; colonne = f"{slot}_champion_id"
DRAFT_SLOTS = tuple(
    f"{side}_{role.lower()}" for side in ("team", "enemy") for role in ROLES
)

SYNERGY_TYPES = ("positive", "negative")
PATCH_CATEGORIES = ("champion", "item", "system", "meta")


def _uuid() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ────────────────────────────── Engine ─────────────────────────────────────
def make_engine(url: str):
    """Build an engine; in-memory SQLite shares one connection across threads."""
    kwargs = {"future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)

    if engine.dialect.name == "sqlite":
        # Sans ce PRAGMA, SQLite ignore les ON DELETE CASCADE
        @event.listens_for(engine, "connect")
        def _enable_fk(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def make_session_factory(engine):
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


# Si on utilise SQLite, créer le dossier parent du fichier .db
if settings.DB_URL.startswith("sqlite:///") and settings.DB_URL != "sqlite:///:memory:":
    db_file = settings.DB_URL.replace("sqlite:///", "")
    Path(db_file).parent.mkdir(parents=True, exist_ok=True)

engine = make_engine(settings.DB_URL)
SessionLocal = make_session_factory(engine)

# Base pour les modèles
Base = declarative_base()


class Champion(Base):
    __tablename__ = "champions"
    id = Column(String, primary_key=True)  # id Data Dragon ("Ahri", "MonkeyKing"…)
    name = Column(Text, nullable=False)
    image_url = Column(Text, nullable=False)
    key = Column(Text, nullable=False)
    roles = Column(JSON, nullable=False, default=list)


class ChampionEvaluation(Base):
    __tablename__ = "champion_evaluations"
    __table_args__ = tuple(
        CheckConstraint(f"{f} BETWEEN {RATING_MIN} AND {RATING_MAX}", name=f"ck_eval_{f}")
        for f in RATING_FIELDS
    )
    id = Column(String, primary_key=True, default=_uuid)
    champion_id = Column(String, ForeignKey("champions.id"), nullable=False, unique=True, index=True)
    prio_lane = Column(Integer, nullable=False, default=0)
    strongside = Column(Integer, nullable=False, default=0)
    weakside = Column(Integer, nullable=False, default=0)
    engage = Column(Integer, nullable=False, default=0)
    peeling = Column(Integer, nullable=False, default=0)
    split = Column(Integer, nullable=False, default=0)
    hypercarry = Column(Integer, nullable=False, default=0)
    controle = Column(Integer, nullable=False, default=0)


class Draft(Base):
    __tablename__ = "drafts"
    id = Column(String, primary_key=True, default=_uuid)
    name = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    team_top_champion_id = Column(String)
    team_jgl_champion_id = Column(String)
    team_mid_champion_id = Column(String)
    team_adc_champion_id = Column(String)
    team_sup_champion_id = Column(String)
    enemy_top_champion_id = Column(String)
    enemy_jgl_champion_id = Column(String)
    enemy_mid_champion_id = Column(String)
    enemy_adc_champion_id = Column(String)
    enemy_sup_champion_id = Column(String)
    team_bans = Column(JSON, nullable=False, default=list)
    enemy_bans = Column(JSON, nullable=False, default=list)

    variants = relationship(
        "DraftVariant", cascade="all, delete-orphan", passive_deletes=True,
    )


class DraftVariant(Base):
    __tablename__ = "draft_variants"
    id = Column(String, primary_key=True, default=_uuid)
    draft_id = Column(String, ForeignKey("drafts.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    top_champion_id = Column(String)
    jgl_champion_id = Column(String)
    mid_champion_id = Column(String)
    adc_champion_id = Column(String)
    sup_champion_id = Column(String)


class Scrim(Base):
    __tablename__ = "scrims"
    id = Column(String, primary_key=True, default=_uuid)
    date = Column(DateTime, nullable=False, default=_utcnow, index=True)
    opponent = Column(Text, nullable=False)
    is_win = Column(Boolean, nullable=False)
    score = Column(Text, nullable=False)
    comments = Column(Text, nullable=False, default="")
    number_of_games = Column(Integer)
    compositions = Column(JSON)  # [{"top": "Gnar", "jgl": …}, …] une entrée par game
    drafts = Column(JSON)        # [{"gameNumber": 1, "draftId": "…"}, …]


class Player(Base):
    __tablename__ = "players"
    id = Column(String, primary_key=True, default=_uuid)
    name = Column(Text, nullable=False, unique=True)
    role = Column(Text, nullable=False)

    availability = relationship(
        "PlayerAvailability", cascade="all, delete-orphan", passive_deletes=True,
    )


class PlayerAvailability(Base):
    __tablename__ = "player_availability"
    __table_args__ = (
        UniqueConstraint("player_id", "day_of_week", name="uq_availability_player_day"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day"),
    )
    id = Column(String, primary_key=True, default=_uuid)
    player_id = Column(String, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    is_available = Column(Boolean, nullable=False, default=False)


class ChampionSynergy(Base):
    __tablename__ = "champion_synergies"
    __table_args__ = (
        CheckConstraint(f"rating BETWEEN {RATING_MIN} AND {RATING_MAX}", name="ck_synergy_rating"),
    )
    id = Column(String, primary_key=True, default=_uuid)
    champion1_id = Column(String, ForeignKey("champions.id"), nullable=False, index=True)
    champion2_id = Column(String, ForeignKey("champions.id"), nullable=False, index=True)
    synergy_type = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False, default=0)
    notes = Column(Text, nullable=False, default="")


class PatchNote(Base):
    __tablename__ = "patch_notes"
    id = Column(String, primary_key=True, default=_uuid)
    version = Column(Text, nullable=False)
    title = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow, index=True)


def init_db(bind=None):
    """Créer les tables si elles n'existent pas encore."""
    Base.metadata.create_all(bind=bind or engine)
