"""Character commit (variable store sync), schema detection, and prompt endpoints."""

from fastapi import APIRouter, HTTPException

from backend import storage
from backend.variable_store import variable_store
from destiny_start.prompt import PromptError, generate_ai_prompt
from destiny_start.sync import sync_character
from destiny_start.variables.schema import detect_schema_version
from destiny_start.variables.store import VariableStoreError

from .models import PromptBody, SyncBody

router = APIRouter()


@router.post("/sync")
async def sync(body: SyncBody):
    """Write the character's curated data into the variable store."""
    config = storage.get_config()
    try:
        report = await sync_character(
            variable_store(),
            body.character,
            body.items,
            body.skills,
            body.destined_ones,
            message_id=body.message_id or config["message_id"],
            mode=config["write_strategy"],
        )
    except VariableStoreError as e:
        raise HTTPException(502, str(e))
    return report.model_dump(mode="json")


@router.get("/variables/schema")
async def schema_version(message_id: str | None = None):
    """Detect which variable layout the store currently uses."""
    config = storage.get_config()
    try:
        version = await detect_schema_version(
            variable_store(), message_id or config["message_id"]
        )
    except VariableStoreError as e:
        raise HTTPException(502, str(e))
    return {"version": version.value}


@router.post("/prompt")
async def prompt(body: PromptBody):
    """Render the opening-story prompt for the character's custom content."""
    try:
        text = generate_ai_prompt(
            body.character,
            body.equipments,
            body.destined_ones,
            body.background,
            body.items,
            body.skills,
            template=storage.get_config()["prompt_template"],
        )
    except PromptError as e:
        raise HTTPException(400, str(e))
    return {"prompt": text}
