import asyncio
import logging
from typing import List, Literal, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query

from linkforge import config
from linkforge.qr import QRGenerationError, generate_qr_code
from linkforge.schemas import (AliasAvailability, LinkCreate, LinkRecord, QRCodeRecord, QRCustomization,
                               ShortenResponse, UrlCheck, ValidationResult)
from linkforge.storage import LinkStore, get_store
from linkforge.utils import (ShortCodeError, calculate_expiration, filter_links, get_unique_short_code,
                             is_custom_alias_available, validate_custom_alias)
from linkforge.validator import sanitize_url, validate_url

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/validate", response_model=ValidationResult)
async def check_url(payload: UrlCheck):
    return validate_url(payload.url)

@router.post("/shorten", response_model=ShortenResponse)
async def create_link(link: LinkCreate, store: LinkStore = Depends(get_store)):
    validation = validate_url(link.url)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail=validation.error or "Invalid URL")
    try:
        if link.custom_alias:
            validate_custom_alias(link.custom_alias)
            if not is_custom_alias_available(link.custom_alias, store.urls):
                raise HTTPException(status_code=400, detail="This alias is already taken")
        await asyncio.sleep(config.SHORTEN_DELAY_SECONDS)
        original_url = sanitize_url(validation.normalized_url)
        short_code = get_unique_short_code(original_url, store.urls, link.custom_alias)
    except ShortCodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    new_link = LinkRecord(
        original_url=original_url,
        short_code=short_code,
        custom_alias=link.custom_alias,
        expires_at=calculate_expiration(link.expiration_days),
        tags=link.tags,
        description=link.description,
    )
    await store.add_link(new_link)
    logger.info("Link created: %s -> %s", new_link.short_code, new_link.original_url)
    warning = None if validation.is_safe else validation.error
    return ShortenResponse(link=new_link, warning=warning)

@router.get("/links", response_model=List[LinkRecord])
async def list_links(status: Literal["all", "active", "expired"] = Query("all"),
                     store: LinkStore = Depends(get_store)):
    return filter_links(store.urls, status)

@router.get("/aliases/{alias}/availability", response_model=AliasAvailability)
async def alias_availability(alias: str, store: LinkStore = Depends(get_store)):
    return AliasAvailability(alias=alias, available=is_custom_alias_available(alias, store.urls))

@router.get("/links/{url_id}", response_model=LinkRecord)
async def get_link(url_id: str, store: LinkStore = Depends(get_store)):
    link = store.get_link(url_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    return link

@router.delete("/links/{url_id}")
async def delete_link(url_id: str, store: LinkStore = Depends(get_store)):
    if not await store.delete_link(url_id):
        raise HTTPException(status_code=404, detail="Link not found")
    return {"message": "Link deleted"}

@router.post("/links/{url_id}/click", response_model=LinkRecord)
async def click_link(url_id: str, store: LinkStore = Depends(get_store)):
    link = await store.record_click(url_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    logger.info("Simulated click on %s, new count: %d", link.short_code, link.click_count)
    return link

@router.post("/links/{url_id}/scan", response_model=LinkRecord)
async def scan_link(url_id: str, store: LinkStore = Depends(get_store)):
    link = await store.record_scan(url_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    logger.info("Simulated scan on %s, new count: %d", link.short_code, link.qr_code_scans)
    return link

@router.post("/links/{url_id}/qrcode", response_model=QRCodeRecord)
async def create_link_qrcode(url_id: str, customization: Optional[QRCustomization] = Body(None),
                             store: LinkStore = Depends(get_store)):
    link = store.get_link(url_id)
    if not link:
        raise HTTPException(status_code=404, detail="Link not found")
    customization = customization or QRCustomization()
    try:
        data_url = generate_qr_code(link.short_url, customization)
    except QRGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    qr_code = store.add_qr_code(QRCodeRecord(
        text=link.short_url,
        data_url=data_url,
        customization=customization.model_copy(),
        url_id=link.id,
    ))
    logger.info("Generated QR code for link: %s", link.short_code)
    return qr_code
