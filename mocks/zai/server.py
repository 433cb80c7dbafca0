"""
Mock ZAI OpenAPI server for tests.

Verifies the signed Authorization header, records every request it
receives, and serves canned chat, image, embedding and file responses.
"""

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import jwt
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse

from zai.common.logging import get_logger

API_PREFIX = "/api/paas/v4"


@dataclass
class RecordedRequest:
    method: str
    path: str
    headers: Dict[str, str]
    body: bytes
    query: Dict[str, str] = field(default_factory=dict)

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None

    def token_claims(self) -> Dict[str, Any]:
        return jwt.decode(self.headers["authorization"], options={"verify_signature": False})


def _error_body(message: str, error_type: str, code: Optional[str] = None) -> Dict[str, Any]:
    error: Dict[str, Any] = {"message": message, "type": error_type}
    if code is not None:
        error["code"] = code
    return {"error": error}


class MockZAIServer:
    """Mock ZAI server implementation."""

    def __init__(self, secrets: Optional[Dict[str, str]] = None, stream_chunks: int = 5):
        self.logger = get_logger("mock.zai")
        self.app = FastAPI(title="Mock ZAI", version="1.0.0")
        # key id -> secret; keys not listed here are not signature-checked
        self.secrets = dict(secrets or {})
        self.stream_chunks = stream_chunks
        self.requests: List[RecordedRequest] = []
        self.errors: Dict[str, Tuple[int, Any]] = {}
        self.files: Dict[str, Dict[str, Any]] = {}

        self._setup_middleware()
        self._setup_routes()

    @property
    def last_request(self) -> RecordedRequest:
        return self.requests[-1]

    def set_error(self, path: str, status_code: int, body: Any) -> None:
        """Answer every request to ``path`` with ``status_code`` and ``body``."""
        self.errors[API_PREFIX + path] = (status_code, body)

    async def _record(self, request: Request) -> RecordedRequest:
        recorded = RecordedRequest(
            method=request.method,
            path=request.url.path[len(API_PREFIX):],
            headers={key.lower(): value for key, value in request.headers.items()},
            body=await request.body(),
            query=dict(request.query_params),
        )
        self.requests.append(recorded)
        return recorded

    def _check_token(self, token: Optional[str]) -> Optional[JSONResponse]:
        if not token:
            return JSONResponse(status_code=401, content=_error_body("Missing token", "authentication_error", "1000"))
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
            secret = self.secrets.get(claims.get("api_key"))
            if secret is not None:
                jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as exc:
            self.logger.info("Rejected token", error=str(exc))
            return JSONResponse(status_code=401, content=_error_body("Invalid token", "authentication_error", "1001"))
        return None

    def _setup_middleware(self):

        @self.app.middleware("http")
        async def authenticate(request: Request, call_next):
            if request.url.path in self.errors:
                await self._record(request)
                status_code, body = self.errors[request.url.path]
                return JSONResponse(status_code=status_code, content=body)

            rejection = self._check_token(request.headers.get("authorization"))
            if rejection is not None:
                await self._record(request)
                return rejection
            return await call_next(request)

    def _setup_routes(self):
        """Set up mock API routes."""
        router = APIRouter(prefix=API_PREFIX)

        @router.post("/echo")
        async def echo(request: Request):
            recorded = await self._record(request)
            return {"received": recorded.json()}

        @router.post("/chat/completions")
        async def chat_completions(request: Request):
            recorded = await self._record(request)
            body = recorded.json() or {}
            completion_id = f"chatcmpl-{uuid.uuid4().hex[:12]}"
            if body.get("stream"):
                return StreamingResponse(
                    self._stream_completion(completion_id, body.get("model", "glm-4")),
                    media_type="text/event-stream",
                )
            return {
                "id": completion_id,
                "object": "chat.completion",
                "created": int(time.time()),
                "model": body.get("model"),
                "choices": [{
                    "index": 0,
                    "message": {"role": "assistant", "content": "Hello from the mock."},
                    "finish_reason": "stop",
                }],
                "usage": {"prompt_tokens": 5, "completion_tokens": 5, "total_tokens": 10},
            }

        @router.post("/images/generations")
        async def images(request: Request):
            recorded = await self._record(request)
            body = recorded.json() or {}
            return {
                "created": int(time.time()),
                "data": [{"url": f"https://mock.zai/images/{i}.png"} for i in range(body.get("n", 1))],
            }

        @router.post("/embeddings")
        async def embeddings(request: Request):
            recorded = await self._record(request)
            body = recorded.json() or {}
            inputs = body.get("input")
            inputs = inputs if isinstance(inputs, list) else [inputs]
            return {
                "object": "list",
                "model": body.get("model"),
                "data": [
                    {"object": "embedding", "index": i, "embedding": [0.1, 0.2, 0.3]}
                    for i in range(len(inputs))
                ],
                "usage": {"prompt_tokens": len(inputs), "total_tokens": len(inputs)},
            }

        @router.post("/files")
        async def upload_file(request: Request):
            recorded = await self._record(request)
            file_id = f"file-{uuid.uuid4().hex[:8]}"
            file_object = {
                "id": file_id,
                "object": "file",
                "bytes": len(recorded.body),
                "created_at": int(time.time()),
                "filename": "upload",
                "purpose": "file-extract",
            }
            self.files[file_id] = file_object
            return file_object

        @router.get("/files")
        async def list_files(request: Request):
            await self._record(request)
            return {"object": "list", "data": list(self.files.values()), "has_more": False}

        @router.delete("/files/{file_id}")
        async def delete_file(file_id: str, request: Request):
            await self._record(request)
            if file_id not in self.files:
                return JSONResponse(
                    status_code=404,
                    content=_error_body(f"File {file_id} not found", "invalid_request_error", "1214"),
                )
            del self.files[file_id]
            return {"id": file_id, "object": "file", "deleted": True}

        @router.get("/files/{file_id}/content")
        async def file_content(file_id: str, request: Request):
            await self._record(request)
            return PlainTextResponse(f"contents of {file_id}")

        self.app.include_router(router)

    async def _stream_completion(self, completion_id: str, model: str):
        for index in range(self.stream_chunks):
            chunk = {
                "id": completion_id,
                "model": model,
                "choices": [{"index": 0, "delta": {"content": f"part{index} "}}],
            }
            yield f"data: {json.dumps(chunk)}\n\n".encode()
        yield b"data: [DONE]\n\n"


def create_app(secrets: Optional[Dict[str, str]] = None) -> FastAPI:
    """Create a standalone mock application."""
    return MockZAIServer(secrets).app
