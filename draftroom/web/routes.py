# draftroom/web/routes.py
# ============================================================================
# Routes REST /api/* : champions, drafts, scrims, roster, synergies, patchs
# ============================================================================

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from draftroom.schemas import (
    AvailabilityOut, AvailabilityUpsert, ChampionOut, ChampionWithEvaluationOut,
    DraftCreate, DraftOut, DraftUpdate, DraftWithDetailsOut, EvaluationOut,
    EvaluationUpdate, PatchCategory, PatchNoteCreate, PatchNoteOut, PlayerCreate,
    PlayerOut, RolesUpdate, ScrimCreate, ScrimOut, ScrimUpdate, StatisticsOut,
    SynergyCreate, SynergyOut, VariantCreate, VariantOut,
)
from draftroom.services.stats import compute_statistics
from draftroom.storage import Storage

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

SUCCESS = {"success": True}


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


# ───────────────────────────── Champions ─────────────────────────────
@router.get("/champions", response_model=List[ChampionWithEvaluationOut], tags=["champions"])
def list_champions(storage: Storage = Depends(get_storage)):
    return [ChampionWithEvaluationOut.from_view(v) for v in storage.list_champions_with_evaluations()]


@router.get("/champions/{champion_id}", response_model=ChampionWithEvaluationOut, tags=["champions"])
def get_champion(champion_id: str, storage: Storage = Depends(get_storage)):
    return ChampionWithEvaluationOut.from_view(storage.get_champion_with_evaluation(champion_id))


@router.put("/champions/{champion_id}/roles", response_model=ChampionOut, tags=["champions"])
def update_champion_roles(champion_id: str, body: RolesUpdate, storage: Storage = Depends(get_storage)):
    champion = storage.update_champion_roles(champion_id, body.roles)
    log.info("Roles %s → %s", champion_id, champion.roles)
    return champion


@router.post("/champions/evaluate", response_model=EvaluationOut, tags=["champions"])
def evaluate_champion(body: EvaluationUpdate, storage: Storage = Depends(get_storage)):
    return storage.upsert_evaluation(body.champion_id, body.ratings())


# ───────────────────────────── Drafts ────────────────────────────────
@router.get("/drafts", response_model=List[DraftWithDetailsOut], tags=["drafts"])
def list_drafts(storage: Storage = Depends(get_storage)):
    return [DraftWithDetailsOut.from_view(v) for v in storage.list_drafts_with_details()]


@router.post("/drafts", response_model=DraftOut, tags=["drafts"])
def create_draft(body: DraftCreate, storage: Storage = Depends(get_storage)):
    draft = storage.insert_draft(body.model_dump())
    log.info("Draft créée: %s (%s)", draft.name, draft.id)
    return draft


@router.put("/drafts/{draft_id}", response_model=DraftOut, tags=["drafts"])
def update_draft(draft_id: str, body: DraftUpdate, storage: Storage = Depends(get_storage)):
    return storage.update_draft(draft_id, body.model_dump(exclude_unset=True))


@router.delete("/drafts/{draft_id}", tags=["drafts"])
def delete_draft(draft_id: str, storage: Storage = Depends(get_storage)):
    storage.delete_draft(draft_id)
    return SUCCESS


@router.post("/drafts/{draft_id}/variants", response_model=VariantOut, tags=["drafts"])
def create_variant(draft_id: str, body: VariantCreate, storage: Storage = Depends(get_storage)):
    return storage.insert_variant(draft_id, body.model_dump())


@router.delete("/variants/{variant_id}", tags=["drafts"])
def delete_variant(variant_id: str, storage: Storage = Depends(get_storage)):
    storage.delete_variant(variant_id)
    return SUCCESS


# ───────────────────────────── Scrims ────────────────────────────────
@router.get("/scrims", response_model=List[ScrimOut], tags=["scrims"])
def list_scrims(storage: Storage = Depends(get_storage)):
    return storage.get_scrim_list()


@router.get("/scrims/statistics", response_model=StatisticsOut, tags=["scrims"])
def scrim_statistics(storage: Storage = Depends(get_storage)):
    # Recalculé à chaque appel sur une lecture cohérente scrims + drafts
    scrims, drafts = storage.statistics_snapshot()
    return compute_statistics(scrims, drafts)


@router.post("/scrims", response_model=ScrimOut, tags=["scrims"])
def create_scrim(body: ScrimCreate, storage: Storage = Depends(get_storage)):
    scrim = storage.insert_scrim(body.to_store())
    log.info("Scrim vs %s enregistré (%s)", scrim.opponent, "W" if scrim.is_win else "L")
    return scrim


@router.put("/scrims/{scrim_id}", response_model=ScrimOut, tags=["scrims"])
def update_scrim(scrim_id: str, body: ScrimUpdate, storage: Storage = Depends(get_storage)):
    return storage.update_scrim(scrim_id, body.to_store())


@router.delete("/scrims/{scrim_id}", tags=["scrims"])
def delete_scrim(scrim_id: str, storage: Storage = Depends(get_storage)):
    storage.delete_scrim(scrim_id)
    return SUCCESS


# ───────────────────────────── Roster ────────────────────────────────
@router.get("/players", response_model=List[PlayerOut], tags=["roster"])
def list_players(storage: Storage = Depends(get_storage)):
    return storage.get_player_list()


@router.post("/players", response_model=PlayerOut, tags=["roster"])
def create_player(body: PlayerCreate, storage: Storage = Depends(get_storage)):
    return storage.insert_player(body.name.strip(), body.role.strip())


@router.delete("/players/{player_id}", tags=["roster"])
def delete_player(player_id: str, storage: Storage = Depends(get_storage)):
    storage.delete_player(player_id)
    return SUCCESS


@router.get("/availability", response_model=List[AvailabilityOut], tags=["roster"])
def list_availability(
    player_id: Optional[str] = Query(None, alias="playerId"),
    storage: Storage = Depends(get_storage),
):
    return storage.get_availability_list(player_id)


@router.post("/availability", response_model=AvailabilityOut, tags=["roster"])
def upsert_availability(body: AvailabilityUpsert, storage: Storage = Depends(get_storage)):
    return storage.upsert_availability(body.player_id, body.day_of_week, body.is_available)


# ───────────────────────────── Synergies ─────────────────────────────
@router.get("/synergies", response_model=List[SynergyOut], tags=["synergies"])
def list_synergies(
    champion_id: Optional[str] = Query(None, alias="championId"),
    storage: Storage = Depends(get_storage),
):
    return storage.get_synergy_list(champion_id)


@router.post("/synergies", response_model=SynergyOut, tags=["synergies"])
def create_synergy(body: SynergyCreate, storage: Storage = Depends(get_storage)):
    return storage.insert_synergy(
        body.champion1_id, body.champion2_id, body.synergy_type, body.rating, body.notes,
    )


@router.delete("/synergies/{synergy_id}", tags=["synergies"])
def delete_synergy(synergy_id: str, storage: Storage = Depends(get_storage)):
    storage.delete_synergy(synergy_id)
    return SUCCESS


# ───────────────────────────── Patch notes ───────────────────────────
@router.get("/patchnotes", response_model=List[PatchNoteOut], tags=["patchnotes"])
def list_patch_notes(
    category: Optional[PatchCategory] = None,
    storage: Storage = Depends(get_storage),
):
    return storage.get_patch_note_list(category)


@router.post("/patchnotes", response_model=PatchNoteOut, tags=["patchnotes"])
def create_patch_note(body: PatchNoteCreate, storage: Storage = Depends(get_storage)):
    return storage.insert_patch_note(body.version, body.title, body.content, body.category)


@router.delete("/patchnotes/{note_id}", tags=["patchnotes"])
def delete_patch_note(note_id: str, storage: Storage = Depends(get_storage)):
    storage.delete_patch_note(note_id)
    return SUCCESS
