"""Draft endpoints: start a new character, check a draft against the rules."""

from fastapi import APIRouter

from destiny_start.models import CharacterDraft
from destiny_start.presets.draft import new_draft
from destiny_start.rules import summarize_draft

from .models import NewDraftBody

router = APIRouter()


@router.post("/drafts")
async def create_draft(body: NewDraftBody):
    """Blank draft with rolled reincarnation points."""
    return new_draft(body.name).to_json_dict()


@router.post("/drafts/summary")
async def draft_summary(body: CharacterDraft):
    """Attribute totals, point/cost budgets and rule issues for a draft."""
    return summarize_draft(body).to_json_dict()
