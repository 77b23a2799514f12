"""FastAPI application for the storyanchor local JSON API."""

import secrets
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import __version__
from ..adapters.yaml_codec import anchor_to_data, shot_to_data
from ..core.capture import capture_anchor
from ..core.duration import shot_duration_ms
from ..core.locator import all_blocks_in_order
from ..core.validation import find_unlinked
from ..errors import DocumentLoadError, ShotNotFound, StoryboardError
from ..lint import lint_shots
from ..storyboard import (
    find_shot,
    link_shot,
    reorder_shots,
    set_duration,
    sorted_shots,
    unlink_shot,
)


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with document and storyboard stores
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="Storyanchor API",
        description="Local JSON API for storyboard block anchoring",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    @app.exception_handler(ShotNotFound)
    async def shot_not_found(request: Request, exc: ShotNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(StoryboardError)
    @app.exception_handler(DocumentLoadError)
    async def unreadable_project(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    def read_document(document_id: str) -> dict[str, Any]:
        document = runtime.documents.read(document_id)
        if document is None:
            raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
        return document

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "version": __version__}

    @app.get("/documents")
    async def list_documents(auth: None = Depends(verify_token)) -> list[str]:
        return list(runtime.documents.list_all_ids())

    @app.get("/documents/{document_id}/blocks")
    async def blocks(document_id: str, auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        """Blocks of a document in document order."""
        document = read_document(document_id)
        return [{"blockId": b.block_id, "text": b.text} for b in all_blocks_in_order(document)]

    @app.get("/documents/{document_id}/anchor")
    async def anchor(
        document_id: str,
        block: str = Query(..., description="Block ID"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Anchor that linking to ``block`` would store."""
        document = read_document(document_id)
        captured = capture_anchor(document, block, document_id, runtime.config.anchoring)
        if captured is None:
            raise HTTPException(status_code=404, detail=f"Block {block} not found")
        return anchor_to_data(captured)

    @app.get("/shots")
    async def shots(auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        return [shot_to_data(s) for s in sorted_shots(runtime.load_shots())]

    @app.get("/validate")
    async def validate(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Ids of shots whose links no longer resolve."""
        unlinked = find_unlinked(
            runtime.load_shots(), runtime.load_documents(), runtime.config.anchoring
        )
        return {"unlinked": sorted(unlinked)}

    @app.post("/repair")
    async def repair(
        dry_run: bool = Query(False, description="Report without saving"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Relink shots against the current documents."""
        report = runtime.repair(save=not dry_run)
        return {
            "outcomes": [o.to_dict() for o in report.outcomes],
            "changed": sorted(report.changed),
            "unlinked": sorted(report.unlinked),
            "shots": [shot_to_data(s) for s in report.shots],
        }

    @app.post("/shots/{shot_id}/link")
    async def link(
        shot_id: str,
        document: str = Query(..., description="Document ID"),
        block: str = Query(..., description="Block ID"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Link a shot to a block, capturing a fresh anchor."""
        current = runtime.load_shots()
        find_shot(current, shot_id)
        captured = capture_anchor(
            read_document(document), block, document, runtime.config.anchoring
        )
        if captured is None:
            raise HTTPException(status_code=404, detail=f"Block {block} not found")
        updated = link_shot(current, shot_id, captured)
        runtime.storyboard.save(updated)
        return shot_to_data(find_shot(updated, shot_id))

    @app.post("/shots/{shot_id}/unlink")
    async def unlink(shot_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        updated = unlink_shot(runtime.load_shots(), shot_id)
        runtime.storyboard.save(updated)
        return shot_to_data(find_shot(updated, shot_id))

    @app.get("/shots/{shot_id}/duration")
    async def duration(shot_id: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        shot = find_shot(runtime.load_shots(), shot_id)
        ms = shot_duration_ms(shot, runtime.load_documents(), runtime.config.duration)
        return {"shot": shot_id, "duration_ms": int(ms)}

    @app.put("/shots/{shot_id}/duration")
    async def set_duration_override(
        shot_id: str,
        ms: int = Query(..., description="Manual duration in milliseconds"),
        auth: None = Depends(verify_token),
    ) -> dict[str, Any]:
        """Set a shot's manual duration override."""
        updated = set_duration(runtime.load_shots(), shot_id, ms)
        runtime.storyboard.save(updated)
        return shot_to_data(find_shot(updated, shot_id))

    @app.delete("/shots/{shot_id}/duration")
    async def clear_duration_override(
        shot_id: str, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        updated = set_duration(runtime.load_shots(), shot_id, None)
        runtime.storyboard.save(updated)
        return shot_to_data(find_shot(updated, shot_id))

    @app.post("/shots/reorder")
    async def reorder(
        shot_ids: list[str] = Body(..., description="Shot IDs in the new order"),  # noqa: B008
        auth: None = Depends(verify_token),
    ) -> list[dict[str, Any]]:
        """Set playback order; unknown ids are ignored."""
        updated = reorder_shots(runtime.load_shots(), shot_ids)
        runtime.storyboard.save(updated)
        return [shot_to_data(s) for s in updated]

    @app.get("/lint")
    async def lint(auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        findings = lint_shots(
            runtime.load_shots(), runtime.load_documents(), runtime.config.anchoring
        )
        return [
            {"severity": f.severity, "message": f.message, "shot": f.shot_id}
            for f in findings
        ]

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
