from __future__ import annotations

import logging
import os
import uuid
from dataclasses import asdict
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from triage.config import load_config, merge_config
from triage.escalation import build_escalation_sink, dispatch_escalation
from triage.llm import build_fallback_responder
from triage.loader import load_knowledge_base
from triage.normalizer import FALLBACK_RESPONSE, normalize
from triage.pipeline import ChatPipeline
from triage.types import EscalationRecord

load_dotenv()

log_level_name = os.getenv("LOG_LEVEL", "INFO").upper()
log_level = getattr(logging, log_level_name, logging.INFO)
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
INVALID_MESSAGE_ERROR = 'Invalid request: "message" must be a non-empty string'


def fallback_body() -> Dict[str, Any]:
    return asdict(FALLBACK_RESPONSE)


def build_pipeline(config: Dict[str, Any], knowledge_path: Optional[str] = None) -> ChatPipeline:
    source = knowledge_path or os.getenv("KNOWLEDGE_PATH") or config.get("knowledge", {}).get("source", "")
    kb = load_knowledge_base(source)
    return ChatPipeline(config, kb, responder=build_fallback_responder(config))


def create_app(
    config_path: Optional[str] = None,
    knowledge_path: Optional[str] = None,
    pipeline: Optional[ChatPipeline] = None,
    escalation_sink: Optional[Any] = None,
) -> FastAPI:
    config_path = config_path or os.getenv("TRIAGE_CONFIG")
    cfg = merge_config(load_config(config_path) if config_path else None)
    if pipeline is None:
        pipeline = build_pipeline(cfg, knowledge_path)
    sink = escalation_sink if escalation_sink is not None else build_escalation_sink(cfg)

    app = FastAPI(title="Support Triage Responder")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.get("server", {}).get("cors_origins", ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.pipeline = pipeline

    @app.middleware("http")
    async def request_context(request: Request, call_next: Any) -> Response:
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        try:
            response = await call_next(request)
        except Exception:
            # Last resort: the caller still gets a contract body.
            logger.exception("Unhandled route error (request_id=%s path=%s)", request_id, request.url.path)
            response = JSONResponse(fallback_body())
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.post("/chat")
    async def chat(request: Request, background_tasks: BackgroundTasks) -> Response:
        request_id = request.state.request_id
        payload: Any = None
        message: Optional[str] = None
        escalation_scheduled = False

        def schedule_escalation(reply: str, confidence: float, reason: str) -> None:
            record = EscalationRecord(
                question=message or "",
                reply=reply,
                confidence=confidence,
                reason=reason,
                user=payload.get("user") if isinstance(payload, dict) else None,
            )
            background_tasks.add_task(dispatch_escalation, sink, record)

        try:
            try:
                payload = await request.json()
            except ValueError:
                payload = None
            raw_message = payload.get("message") if isinstance(payload, dict) else None
            if not isinstance(raw_message, str) or not raw_message.strip():
                return JSONResponse(
                    {"error": INVALID_MESSAGE_ERROR, "requestId": request_id},
                    status_code=400,
                )
            message = raw_message

            try:
                candidate = await pipeline.respond(message)
            except Exception as exc:
                logger.error(
                    "Pipeline error, returning fallback (request_id=%s): %s",
                    request_id,
                    exc,
                    exc_info=True,
                )
                candidate = None

            response = normalize(candidate)
            if response.escalated:
                schedule_escalation(
                    response.reply,
                    response.confidence,
                    getattr(candidate, "reason", "pipeline_error"),
                )
                escalation_scheduled = True
            return JSONResponse(asdict(response))
        except Exception:
            logger.exception("Catastrophic gateway error (request_id=%s)", request_id)
            if message is not None and not escalation_scheduled:
                schedule_escalation(FALLBACK_RESPONSE.reply, FALLBACK_RESPONSE.confidence, "pipeline_error")
            return JSONResponse(fallback_body())

    @app.get("/health")
    async def health() -> Dict[str, Any]:
        return {"status": "ok", "intents": len(pipeline.knowledge_base)}

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(create_app(), host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "5000")))
