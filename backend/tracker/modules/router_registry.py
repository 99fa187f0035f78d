"""Central router registry for module-oriented composition."""
from __future__ import annotations

from fastapi import FastAPI

from tracker.routers.tracker import router as TRACKER_ROUTER

ALL_ROUTERS = (TRACKER_ROUTER,)


def include_all_routers(app: FastAPI) -> None:
    for router in ALL_ROUTERS:
        app.include_router(router)
