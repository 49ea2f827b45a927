from __future__ import annotations

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from ..domain.errors import NotFound
from ..services.ical_svc import tropical

router = APIRouter()


@router.get("/api/tropical")
def api_tropical(conference: str | None = None, event: str | None = None, debug: str | None = None):
    """trop-iCal: iCal of a conference, or of one event when `event` is given."""
    if not conference:
        raise HTTPException(status_code=404, detail="Missing 'conference' argument")
    try:
        uid, text = tropical(conference, event)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))

    if debug and debug != "0":
        return Response(content=text, media_type="text/plain")
    return Response(
        content=text,
        media_type="text/calendar",
        headers={"Content-Disposition": f"attachment; filename={uid}.ics"},
    )
