from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import date
import logging
from dotenv import load_dotenv

# 환경 변수 로드 (src.config가 import 시점에 환경 변수를 읽으므로 가장 먼저)
load_dotenv()

from src.config import LOG_LEVEL, get_now
from src.chatbot.graph_manager import CompanionManager
from src.database import Database, StoreError
from src.database.schemas import MemoryType
from src.utils.exceptions import (
    CompanionError,
    NotAuthenticatedError,
    MessageNotFoundError,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="데일리 컴패니언")

# 데이터베이스 및 CompanionManager 초기화
db = Database()
companion_manager = CompanionManager(db)


# 앱 시작/종료 시 처리
@app.on_event("startup")
async def startup_event():
    await db.test_connection()


@app.on_event("shutdown")
async def shutdown_event():
    await companion_manager.shutdown()


# ============================================
# 오류 → JSON 응답 (채팅은 항상 사용 가능한 상태 유지)
# ============================================

@app.exception_handler(CompanionError)
async def companion_error_handler(request: Request, exc: CompanionError):
    if isinstance(exc, NotAuthenticatedError):
        status_code = 401
    elif isinstance(exc, MessageNotFoundError):
        status_code = 404
    else:
        # SessionNotReady / MessageNotSent / MessageSync - 재시도 가능
        status_code = 503
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": str(exc), "retryable": status_code == 503}
    )


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"[API] 저장소 오류: {exc}")
    return JSONResponse(
        status_code=503,
        content={"error": type(exc).__name__, "detail": "잠시 후 다시 시도해주세요.", "retryable": True}
    )


class ChatRequest(BaseModel):
    userId: str
    message: str


class MessageUpdateRequest(BaseModel):
    content: str


class MemoryCreateRequest(BaseModel):
    memory_type: MemoryType
    title: str
    content: str
    importance_score: int = Field(default=5, ge=1, le=10)
    metadata: Dict[str, Any] = Field(default_factory=dict)


@app.get("/api/status")
async def get_status():
    """서버 상태 확인"""
    return {
        "status": "running",
        "timestamp": get_now().isoformat(),
        "store": "supabase" if db.supabase else "mock",
        "active_users": len(companion_manager.sessions),
    }


# ============================================
# 대화
# ============================================

@app.post("/api/chat")
async def chat(request: ChatRequest):
    """메시지 전송 → 컴패니언 응답"""
    return await companion_manager.handle_conversation(request.userId, request.message)


@app.get("/api/chat/{user_id}/today")
async def get_today_chat(user_id: str):
    """오늘 세션 상태 + 메시지 (created_at 오름차순)"""
    return await companion_manager.get_today(user_id)


@app.patch("/api/chat/{user_id}/messages/{message_id}")
async def update_message(user_id: str, message_id: str, request: MessageUpdateRequest):
    message = await companion_manager.update_message(user_id, message_id, request.content)
    return {"message": message}


@app.delete("/api/chat/{user_id}/messages/{message_id}")
async def delete_message(user_id: str, message_id: str):
    await companion_manager.delete_message(user_id, message_id)
    return {"deleted": True}


@app.delete("/api/chat/{user_id}/today")
async def clear_today_chat(user_id: str):
    await companion_manager.clear_today_chat(user_id)
    return {"cleared": True}


# ============================================
# 지난 세션 / 일일 요약
# ============================================

@app.get("/api/chat/{user_id}/sessions")
async def list_sessions(user_id: str):
    """모든 세션 (최신 날짜순)"""
    sessions = await companion_manager.list_sessions(user_id)
    return {"sessions": sessions}


@app.get("/api/chat/{user_id}/sessions/{chat_date}")
async def get_archived_session(user_id: str, chat_date: date):
    """지난 날짜 세션 (읽기 전용)"""
    try:
        archived = await companion_manager.get_archived_session(user_id, chat_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not archived:
        raise HTTPException(status_code=404, detail="해당 날짜의 대화가 없습니다.")
    return archived


@app.post("/api/chat/{user_id}/sessions/{chat_date}/summary")
async def summarize_day(user_id: str, chat_date: date):
    """해당 날짜 대화 요약 생성 (Summary Builder 수동 실행)"""
    try:
        summary = await companion_manager.summarize_day(user_id, chat_date)
    except (CompanionError, StoreError):
        raise
    except Exception as e:
        logger.error(f"[API] 요약 생성 실패: {user_id} {chat_date} - {e}")
        raise HTTPException(status_code=502, detail="요약을 생성하지 못했습니다.")

    if not summary:
        raise HTTPException(status_code=404, detail="요약할 대화가 없습니다.")
    return {"summary": summary}


# ============================================
# 장기 기억
# ============================================

@app.get("/api/memories/{user_id}")
async def list_memories(
    user_id: str,
    memory_type: Optional[MemoryType] = None,
    q: Optional[str] = None,
    limit: int = 50
):
    """장기 기억 목록 (q가 있으면 title/content 검색)"""
    if q:
        memories = await companion_manager.search_memories(user_id, q, limit=limit)
    else:
        memories = await companion_manager.list_memories(user_id, memory_type=memory_type, limit=limit)
    return {"memories": memories}


@app.post("/api/memories/{user_id}")
async def add_memory(user_id: str, request: MemoryCreateRequest):
    memory = await companion_manager.add_memory(
        user_id,
        memory_type=request.memory_type,
        title=request.title,
        content=request.content,
        importance_score=request.importance_score,
        metadata=request.metadata,
    )
    return {"memory": memory}


@app.delete("/api/memories/{user_id}/{memory_id}")
async def delete_memory(user_id: str, memory_id: str):
    deleted = await companion_manager.delete_memory(user_id, memory_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="해당 기억을 찾을 수 없습니다.")
    return {"deleted": True}


@app.post("/api/logout/{user_id}")
async def logout(user_id: str):
    """로그아웃 - 사용자 엔진(세션/메모리 캐시) 폐기"""
    closed = await companion_manager.close_session(user_id)
    return {"closed": closed}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
