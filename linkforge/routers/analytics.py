import logging
from typing import List
from fastapi import APIRouter, Depends

from linkforge.analytics import generate_analytics
from linkforge.schemas import ActivityLogEntry, AnalyticsSummary, Preferences
from linkforge.storage import LinkStore, get_store

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("/analytics", response_model=AnalyticsSummary)
async def get_analytics(store: LinkStore = Depends(get_store)):
    return generate_analytics(store.urls, store.activities)

@router.get("/activity", response_model=List[ActivityLogEntry])
async def get_activity(store: LinkStore = Depends(get_store)):
    return store.activities

@router.get("/preferences", response_model=Preferences)
async def get_preferences(store: LinkStore = Depends(get_store)):
    return Preferences(dark_mode=store.dark_mode)

@router.put("/preferences", response_model=Preferences)
async def update_preferences(prefs: Preferences, store: LinkStore = Depends(get_store)):
    await store.set_dark_mode(prefs.dark_mode)
    logger.info("Dark mode set to %s", prefs.dark_mode)
    return Preferences(dark_mode=store.dark_mode)

@router.delete("/data")
async def clear_data(store: LinkStore = Depends(get_store)):
    await store.clear()
    return {"message": "All data cleared"}
