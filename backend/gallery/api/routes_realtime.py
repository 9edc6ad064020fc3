# gallery/api/routes_realtime.py
# Viewers connect here and receive "gallery_updated" with the full newest-first list

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from gallery.core.context import GalleryContext, get_ws_context
from gallery.services.broadcaster import GALLERY_UPDATED

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/gallery")
async def ws_gallery(websocket: WebSocket, ctx: GalleryContext = Depends(get_ws_context)) -> None:
    await websocket.accept()
    broadcaster = ctx.broadcaster

    # subscribe before reading the snapshot so a change published during the read still reaches this viewer
    broadcaster.connect(websocket)

    # current list goes only to the new viewer; everyone else already has it
    try:
        try:
            records = await ctx.photos.list_newest_first()
            await websocket.send_json({"event": GALLERY_UPDATED, "data": [r.to_json() for r in records]})
        except Exception as e:
            logger.error(f"initial gallery push failed: {e}")

        while True:
            # viewers don't send anything meaningful; this just waits for the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
