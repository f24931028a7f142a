"""FastAPI application for the DOrSU campus assistant chat service."""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from config.settings import settings
from src.adapters.errors import ChatPipelineError
from src.pipeline.chat_pipeline import ChatPipeline
from src.utils.logging_config import (
    LogConfig,
    configure_logging,
    get_logger,
)

# Configure logging
configure_logging(LogConfig.from_settings(settings))
logger = get_logger(__name__)

API_VERSION = "1.0.0"

# Initialize components (lazy loading)
chat_pipeline: ChatPipeline | None = None

# Create FastAPI app
app = FastAPI(
    title="DOrSU Campus Assistant API",
    description="Chat API answering questions about Davao Oriental State University",
    version=API_VERSION,
)

# Add CORS middleware for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str | None = Field(None, description="The user's message")
    message: str | None = Field(None, description="Alternative name for prompt")
    max_tokens: int | None = Field(
        None, alias="maxTokens", ge=1, description="Override for generated tokens"
    )
    temperature: float | None = Field(
        None, ge=0, le=2, description="Override for sampling temperature"
    )

    @property
    def text(self) -> str:
        return self.prompt or self.message or ""


class IntentInfo(BaseModel):
    """Externally visible intent classification."""

    conversational: str
    confidence: int = Field(..., ge=0, le=100)
    data_source: str = Field(..., alias="dataSource")
    category: str


class ChatResponse(BaseModel):
    """Response model for the chat endpoint."""

    reply: str = Field(..., description="The assistant's reply")
    source: str = Field(..., description="'ai-model' or 'cached'")
    model: str = Field(..., description="Model that produced the reply")
    provider: str = Field(..., description="LLM provider label")
    complexity: str = Field(..., description="Retrieval tier for the query")
    response_time: int = Field(..., alias="responseTime", description="Milliseconds")
    cached: bool = Field(..., description="Whether the reply came from the cache")
    used_knowledge_base: bool = Field(..., alias="usedKnowledgeBase")
    intent: IntentInfo


class ClearCacheResponse(BaseModel):
    success: bool
    message: str
    cleared: int


class ClearConversationResponse(BaseModel):
    success: bool
    cleared: bool


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
    details: dict | None = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")


# Middleware for request size limiting
@app.middleware("http")
async def limit_request_size(request: Request, call_next):
    """Limit request body size to 1MB."""
    content_length = request.headers.get("content-length")
    if content_length:
        try:
            size = int(content_length)
            if size > 1024 * 1024:  # 1MB limit
                return JSONResponse(
                    status_code=413,
                    content={"detail": "Request body too large"}
                )
        except ValueError:
            pass

    response = await call_next(request)

    # Add security headers
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"

    return response


def _require_pipeline() -> ChatPipeline:
    if chat_pipeline is None:
        raise HTTPException(
            status_code=503,
            detail={
                "error": "Service is not initialized yet",
                "code": "SERVICE_UNAVAILABLE",
                "details": {"reason": "Chat pipeline not initialized"},
            },
        )
    return chat_pipeline


def _request_metadata(request: Request) -> dict[str, str | None]:
    """Session correlation data: explicit id, else client IP and user agent."""
    return {
        "session_id": request.headers.get("x-session-id")
        or request.cookies.get("session_id"),
        "client_ip": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


# API endpoints
@app.post(
    "/api/chat",
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Empty prompt"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        502: {"model": ErrorResponse, "description": "Upstream retrieval or LLM failure"},
        503: {"model": ErrorResponse, "description": "Service unavailable"},
    },
)
async def chat(body: ChatRequest, request: Request) -> ChatResponse:
    """
    Answer a chat message.

    Knowledge-base questions are grounded in retrieved DOrSU context; other
    questions are answered from general knowledge.
    """
    pipeline = _require_pipeline()

    prompt = body.text
    if not prompt.strip():
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Prompt cannot be empty",
                "code": "EMPTY_PROMPT",
                "details": None,
            },
        )

    try:
        result = await pipeline.process_chat(
            prompt,
            max_tokens=body.max_tokens,
            temperature=body.temperature,
            request_metadata=_request_metadata(request),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": str(e), "code": "EMPTY_PROMPT", "details": None},
        )
    except ChatPipelineError as e:
        logger.error(f"Chat request failed [{e.code}]: {e!s}")
        raise HTTPException(
            status_code=502,
            detail={"error": str(e), "code": e.code, "details": e.details},
        )
    except Exception as e:
        logger.error(f"Unexpected error processing chat: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={
                "error": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
                "details": {"message": str(e)},
            },
        )

    return ChatResponse(**result.to_response())


@app.post("/api/clear-cache", response_model=ClearCacheResponse)
async def clear_cache() -> ClearCacheResponse:
    """Invalidate every cached reply, e.g. after a knowledge-base refresh."""
    pipeline = _require_pipeline()
    try:
        cleared = pipeline.clear_cache()
    except Exception as e:
        logger.error(f"Failed to clear cache: {e!s}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={
                "error": "Failed to clear cache",
                "code": "INTERNAL_ERROR",
                "details": {"message": str(e)},
            },
        )
    return ClearCacheResponse(
        success=True, message="AI response cache cleared", cleared=cleared
    )


@app.delete("/api/conversation", response_model=ClearConversationResponse)
async def clear_conversation(request: Request) -> ClearConversationResponse:
    """Forget the caller's conversation history."""
    pipeline = _require_pipeline()
    session_id = pipeline.context_store.get_session_id(_request_metadata(request))
    cleared = pipeline.clear_conversation(session_id)
    return ClearConversationResponse(success=True, cleared=cleared)


@app.get("/api/metrics")
async def metrics() -> dict:
    """Request, cache and conversation statistics."""
    return _require_pipeline().get_statistics()


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns the current status of the API service.
    """
    return HealthResponse(
        status="healthy" if chat_pipeline is not None else "starting",
        version=API_VERSION,
    )


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "DOrSU Campus Assistant API",
        "version": API_VERSION,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize components on startup."""
    global chat_pipeline

    logger.info("Starting campus assistant API server...")
    try:
        # Initialize the pipeline if not already set (for testing)
        if chat_pipeline is None:
            chat_pipeline = ChatPipeline.from_settings(settings)
        logger.info("API server started successfully")
    except Exception as e:
        logger.error(f"Failed to start API server: {e!s}", exc_info=True)
        raise


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down API server...")
    try:
        if chat_pipeline is not None:
            await chat_pipeline.close()
        logger.info("API server shut down successfully")
    except Exception as e:
        logger.error(f"Error during shutdown: {e!s}", exc_info=True)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
