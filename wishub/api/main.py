import logging
import secrets
import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.exceptions import HTTPException as StarletteHTTPException

from wishub.config import Settings
from wishub.database.redis_manager import RedisManager
from wishub.errors import StoreError, UnauthorizedError, ValidationError, WisError
from wishub.services import CommunityService, DocumentService, StructureService
from wishub.services.structure_service import REPO_LABELS

logger = logging.getLogger(__name__)


@contextmanager
def failure(message: str) -> Iterator[None]:
    """Turn store and unexpected errors into a 500 carrying message; client errors pass through."""
    try:
        yield
    except StoreError as e:
        logger.error(f"{message}: {e.message} ({e.details})")
        raise StoreError(message, details=e.details if e.details is not None else e.message) from e
    except WisError:
        raise
    except Exception as e:
        logger.exception(message)
        raise WisError(message, details=str(e)) from e


async def _json_body(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError as e:
        raise ValidationError("Request body must be valid JSON", details=str(e)) from e
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def _require(payload: Dict[str, Any], *fields: str) -> None:
    if any(not payload.get(field) for field in fields):
        label = "fields" if len(fields) > 1 else "field"
        raise ValidationError(f"Missing required {label}: {' and '.join(fields)}")


def create_app(manager: Optional[RedisManager] = None, settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    manager = manager or settings.redis.create_manager()

    documents = DocumentService(manager)
    structures = {repo: StructureService(manager, repo) for repo in ("ui", "api")}
    community = CommunityService(manager)

    app = FastAPI(title="WIS Hub")
    app.state.settings = settings
    app.state.manager = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_headers=["Content-Type", "Authorization"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        expose_headers=["Content-Length"],
        max_age=600,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.1f} ms)")
        return response

    @app.exception_handler(WisError)
    async def handle_wis_error(request: Request, exc: WisError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)},
                            headers=getattr(exc, "headers", None))

    bearer = HTTPBearer(auto_error=False)

    def require_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> None:
        if settings.api_token is None:
            return
        if credentials is None or not secrets.compare_digest(credentials.credentials, settings.api_token):
            raise UnauthorizedError("Missing or invalid bearer token")

    public = APIRouter(prefix=settings.api_prefix)
    router = APIRouter(prefix=settings.api_prefix, dependencies=[Depends(require_token)])

    @public.get("/health")
    def health():
        return {"status": "ok"}

    # ==================== DOCUMENTS ====================

    @router.get("/documents")
    def list_documents():
        with failure("Failed to fetch documents"):
            return {"documents": [doc.model_dump() for doc in documents.list()]}

    @router.post("/documents")
    async def create_document(request: Request):
        payload = await _json_body(request)
        _require(payload, "name", "dataUrl")
        with failure("Failed to upload document"):
            document = documents.create(payload)
        return {"document": document.model_dump(), "message": "Document uploaded successfully"}

    @router.put("/documents/{document_id}")
    async def update_document(document_id: str, request: Request):
        payload = await _json_body(request)
        with failure("Failed to update document"):
            document = documents.update(document_id, payload)
        return {"document": document.model_dump(), "message": "Document updated successfully"}

    @router.delete("/documents/{document_id}")
    def delete_document(document_id: str):
        with failure("Failed to delete document"):
            documents.delete(document_id)
        return {"message": "Document deleted successfully"}

    # ==================== PROJECT STRUCTURE ====================

    def _structure_routes(repo: str) -> None:
        service = structures[repo]
        label = REPO_LABELS[repo]

        @router.get(f"/structure/{repo}", name=f"get_{repo}_structure")
        def get_structure():
            with failure(f"Failed to fetch {label} structure"):
                folders = service.get()
            return {"structure": [folder.model_dump(exclude_none=True) for folder in folders]}

        @router.post(f"/structure/{repo}", name=f"replace_{repo}_structure")
        async def replace_structure(request: Request):
            payload = await _json_body(request)
            if payload.get("structure") is None:
                raise ValidationError("Missing required field: structure")
            if not isinstance(payload["structure"], list):
                raise ValidationError("Field structure must be an array")
            with failure(f"Failed to update {label} structure"):
                service.replace(payload["structure"])
            return {"message": f"{label} structure updated successfully"}

    for repo in structures:
        _structure_routes(repo)

    # ==================== COMMUNITY ====================

    @router.get("/community/posts")
    def list_posts():
        with failure("Failed to fetch community posts"):
            return {"posts": [post.model_dump() for post in community.list()]}

    @router.post("/community/posts")
    async def create_post(request: Request):
        payload = await _json_body(request)
        _require(payload, "name", "message")
        with failure("Failed to create post"):
            post = community.create(payload)
        return {"post": post.model_dump(), "message": "Post created successfully"}

    @router.post("/community/posts/{post_id}/comments")
    async def add_comment(post_id: str, request: Request):
        payload = await _json_body(request)
        _require(payload, "name", "message")
        with failure("Failed to add comment"):
            comment = community.add_comment(post_id, payload)
        return {"comment": comment.model_dump(), "message": "Comment added successfully"}

    @router.delete("/community/posts/{post_id}/comments/{comment_id}")
    def delete_comment(post_id: str, comment_id: str):
        with failure("Failed to delete comment"):
            community.delete_comment(post_id, comment_id)
        return {"message": "Comment deleted successfully"}

    @router.delete("/community/posts/{post_id}")
    def delete_post(post_id: str):
        with failure("Failed to delete post"):
            community.delete(post_id)
        return {"message": "Post deleted successfully"}

    app.include_router(public)
    app.include_router(router)
    return app


def main() -> None:
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level,
                        format="[%(levelname)s] %(message)s")
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
