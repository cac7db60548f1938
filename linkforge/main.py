import logging
from fastapi import FastAPI
from linkforge.routers import analytics, links, qrcodes
from linkforge.storage import LinkStore, open_blob_store

logger = logging.getLogger(__name__)
app = FastAPI(
    title="LinkForge",
    version="1.0.0",
    description="URL shortener and QR code generator with local history and analytics",
)

app.include_router(links.router, tags=["links"])
app.include_router(qrcodes.router, prefix="/qrcodes", tags=["qrcodes"])
app.include_router(analytics.router, tags=["analytics"])

@app.on_event("startup")
async def startup():
    blob_store = await open_blob_store()
    app.state.store = LinkStore(blob_store)
    await app.state.store.load()

@app.on_event("shutdown")
async def shutdown():
    await app.state.store.blob_store.close()
