"""
Reorder Kernel API — FastAPI endpoints.

A thin transport over the CollectionStore for:
- Collection management
- Entity listing, appending and removal
- Drag-and-drop reorders
- Explicit renumbering after keyspace exhaustion
"""

import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from reorder_kernel.collection.store import CollectionStore
from reorder_kernel.errors import ReorderError
from reorder_kernel.models.keyspace import KeyspaceConfig
from reorder_kernel.models.reorder import ReorderRequest

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class CollectionCreateRequest(BaseModel):
    id: str
    keyspace: KeyspaceConfig = KeyspaceConfig()


class EntityCreateRequest(BaseModel):
    entity_id: str
    properties: dict = {}


# --- Application Factory ---

def create_app(store: Optional[CollectionStore] = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Reorder Kernel API",
        description="Persistent display order with single-key reorders",
        version="0.1.0",
    )

    cs = store or CollectionStore()
    app.state.collection_store = cs

    @app.exception_handler(ReorderError)
    async def handle_reorder_error(request: Request, exc: ReorderError):
        logger.debug("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})

    # === COLLECTIONS ===

    @app.post("/collections")
    def create_collection(req: CollectionCreateRequest):
        """Create an empty collection with a fixed keyspace."""
        collection = cs.create_collection(req.id, req.keyspace)
        return collection.model_dump(mode="json")

    @app.get("/collections/{collection_id}")
    def get_collection(collection_id: str):
        return cs.get_collection(collection_id).model_dump(mode="json")

    # === ENTITIES ===

    @app.get("/collections/{collection_id}/entities")
    def list_entities(collection_id: str):
        """Entities in display order."""
        return [e.model_dump(mode="json") for e in cs.list_entities(collection_id)]

    @app.post("/collections/{collection_id}/entities")
    def add_entity(collection_id: str, req: EntityCreateRequest):
        """Append an entity at the end of the collection."""
        entity = cs.add_entity(collection_id, req.entity_id, req.properties)
        return entity.model_dump(mode="json")

    @app.delete("/collections/{collection_id}/entities/{entity_id}")
    def remove_entity(collection_id: str, entity_id: str):
        if not cs.remove_entity(collection_id, entity_id):
            raise HTTPException(404, "Entity not found")
        return {"status": "removed", "entity_id": entity_id}

    # === ORDERING ===

    @app.post("/collections/{collection_id}/reorder")
    def reorder(collection_id: str, req: ReorderRequest):
        """Move one entity between two currently adjacent neighbors."""
        outcome = cs.reorder(collection_id, req)
        if not outcome.committed:
            raise HTTPException(409, "Sort key was changed concurrently; refetch and retry")
        return outcome.model_dump(mode="json")

    @app.post("/collections/{collection_id}/renumber")
    def renumber(collection_id: str):
        """Reassign evenly spaced keys to every entity."""
        return [e.model_dump(mode="json") for e in cs.renumber(collection_id)]

    return app


# Default application instance
app = create_app()
