import hmac
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request

import supportbot.config.config as configs
from supportbot.db.storage import Storage, get_storage
from supportbot.model.auth.login import LoginRequest, LoginResponse
from supportbot.model.chat.chat_request import ChatRequest
from supportbot.model.chat.chat_response import ChatResponse
from supportbot.model.logs.feedback_request import FeedbackRequest
from supportbot.model.logs.log_response import InappropriateLogRecord, MessageRecord, SessionLog, UnknownQuestionRecord
from supportbot.service.chat.chat import record_chat_turn

logger = logging.getLogger(__name__)
api_router = APIRouter()


def require_admin(x_admin_password: str = Header(default="")) -> None:
    if not x_admin_password or not hmac.compare_digest(x_admin_password, configs.ADMIN_PASSWORD):
        raise HTTPException(status_code=401, detail="admin password required")


@api_router.get("/health")
def health(storage: Storage = Depends(get_storage)):
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": storage.backend_type,
    }


@api_router.post("/chat", response_model=ChatResponse)
async def chat_endpoint(req: ChatRequest, request: Request, storage: Storage = Depends(get_storage)):
    user_ip = request.client.host if request.client else None
    return await record_chat_turn(storage, req, user_ip)


@api_router.post("/auth/login", response_model=LoginResponse)
def login(req: LoginRequest, storage: Storage = Depends(get_storage)):
    authorized = any(email.lower() == req.email.strip().lower() for email in configs.AUTHORIZED_EMAILS)
    if not authorized:
        raise HTTPException(status_code=401, detail="Email not authorized for testing")
    if not hmac.compare_digest(req.password, configs.ADMIN_PASSWORD):
        raise HTTPException(status_code=401, detail="Invalid password")

    session_id = storage.create_session(req.email)
    logger.info("login email=%s session=%s", req.email, session_id)
    return LoginResponse(success=True, message="Authentication successful", session_id=session_id)


@api_router.post("/auth/logout")
def logout():
    return {"success": True, "message": "Logged out successfully"}


@api_router.post("/logs/feedback")
def feedback(req: FeedbackRequest, storage: Storage = Depends(get_storage)):
    storage.end_session(req.session_id, req.feedback.model_dump())
    return {"success": True, "message": "Feedback recorded"}


@api_router.get("/logs/sessions", response_model=List[SessionLog], dependencies=[Depends(require_admin)])
def session_logs(
    limit: int = Query(default=configs.SESSION_LOG_LIMIT, ge=1, le=1000),
    storage: Storage = Depends(get_storage),
):
    return storage.get_session_logs(limit)


@api_router.get("/logs/sessions/{session_id}/messages", response_model=List[MessageRecord], dependencies=[Depends(require_admin)])
def session_messages(
    session_id: str,
    limit: int = Query(default=configs.SESSION_MESSAGE_LIMIT, ge=1, le=1000),
    storage: Storage = Depends(get_storage),
):
    return storage.get_session_messages(session_id, limit)


@api_router.get("/logs/messages", response_model=List[MessageRecord], dependencies=[Depends(require_admin)])
def all_messages(storage: Storage = Depends(get_storage)):
    return storage.get_all_messages()


@api_router.get("/logs/unknown-questions", response_model=List[UnknownQuestionRecord], dependencies=[Depends(require_admin)])
def unknown_questions(
    reviewed: bool = False,
    limit: Optional[int] = Query(default=None, ge=1, le=1000),
    storage: Storage = Depends(get_storage),
):
    return storage.get_unknown_questions(reviewed, limit)


@api_router.post("/logs/unknown-questions/{question_id}/review", dependencies=[Depends(require_admin)])
def review_unknown_question(question_id: str, storage: Storage = Depends(get_storage)):
    if not storage.review_unknown_question(question_id):
        raise HTTPException(status_code=404, detail="unknown question not found")
    return {"success": True}


@api_router.get("/logs/inappropriate", response_model=List[InappropriateLogRecord], dependencies=[Depends(require_admin)])
def inappropriate_logs(
    limit: int = Query(default=configs.SESSION_LOG_LIMIT, ge=1, le=1000),
    storage: Storage = Depends(get_storage),
):
    return storage.get_inappropriate_logs(limit)
