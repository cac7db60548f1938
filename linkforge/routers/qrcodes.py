import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from linkforge.qr import QRGenerationError, decode_data_url, generate_qr_code, qr_download_filename
from linkforge.schemas import QRCodeRecord, QRCreate
from linkforge.storage import LinkStore, get_store

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("", response_model=QRCodeRecord)
async def create_qrcode(payload: QRCreate, store: LinkStore = Depends(get_store)):
    text = payload.text.strip()
    if not text:
        raise HTTPException(status_code=400, detail="Please enter text or URL")
    try:
        data_url = generate_qr_code(text, payload.customization)
    except QRGenerationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    qr_code = store.add_qr_code(QRCodeRecord(
        text=text,
        data_url=data_url,
        customization=payload.customization.model_copy(),
    ))
    logger.info("Generated QR code %s", qr_code.id)
    return qr_code

@router.get("", response_model=List[QRCodeRecord])
async def list_qrcodes(store: LinkStore = Depends(get_store)):
    return store.qr_codes

@router.get("/{qr_id}", response_model=QRCodeRecord)
async def get_qrcode(qr_id: str, store: LinkStore = Depends(get_store)):
    qr_code = store.get_qr_code(qr_id)
    if not qr_code:
        raise HTTPException(status_code=404, detail="QR code not found")
    return qr_code

@router.get("/{qr_id}/download")
async def download_qrcode(qr_id: str, store: LinkStore = Depends(get_store)):
    qr_code = store.get_qr_code(qr_id)
    if not qr_code:
        raise HTTPException(status_code=404, detail="QR code not found")
    filename = qr_download_filename()
    logger.info("Downloading QR code %s as %s", qr_id, filename)
    return Response(
        content=decode_data_url(qr_code.data_url),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.post("/{qr_id}/scan", response_model=QRCodeRecord)
async def scan_qrcode(qr_id: str, store: LinkStore = Depends(get_store)):
    qr_code = await store.record_qr_scan(qr_id)
    if not qr_code:
        raise HTTPException(status_code=404, detail="QR code not found")
    return qr_code
