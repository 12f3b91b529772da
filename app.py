"""
CodeGraph FastAPI Application

A REST API server for the CodeGraph engine.
Provides endpoints for analyzing projects, explaining and comparing
architectures, browsing snapshot timelines and chatting about an analysis.
"""

from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from codegraph.config import Config
from codegraph.core.factory import LLMFactory, StoreFactory
from codegraph.models.requests import (
    AnalysisRequest,
    AnalyzeRequest,
    ChatAskRequest,
    ChatSendRequest,
    CompareRequest,
    ExplainRequest,
    RenameSessionRequest,
)
from codegraph.services.codegraph_engine import CodeGraphEngine
from codegraph.utils.exceptions import (
    ChatCompletionError,
    CodeGraphError,
    LLMError,
    NotFoundError,
    ValidationError,
)
from codegraph.utils.logger import get_logger, setup_logging

# Global engine instance
engine: CodeGraphEngine | None = None
logger = get_logger(__name__)

SERVICE_ERROR = "Failed to get response from AI service"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    engine_initialized: bool
    llm: str
    record_store: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global engine

    # Load configuration from environment or use defaults
    config = Config.from_env()

    # Initialize logging with config
    setup_logging(config.logging)

    logger.info("Starting CodeGraph server")
    logger.info(
        f"Configuration: LLM={config.llm.provider}/{config.llm.model}, "
        f"Store={config.store.backend}, Snapshots={config.snapshots.base_dir}"
    )

    # Create components using factories
    logger.info("Creating LLM provider")
    llm = LLMFactory.create(config.llm)

    logger.info("Creating stores")
    kv_store = StoreFactory.create(config.store)
    snapshot_store = StoreFactory.create_snapshot_store(config.snapshots)

    # Create and initialize engine
    engine = CodeGraphEngine(
        llm=llm,
        kv_store=kv_store,
        snapshot_store=snapshot_store,
        config=config,
    )

    await engine.initialize()
    app.state.config = config
    logger.info("CodeGraph engine initialized")

    yield

    # Cleanup
    logger.info("Shutting down CodeGraph server")
    await engine.close()
    engine = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="CodeGraph API",
    description="Project structure graphs, architecture timelines and grounded chat",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CodeGraphError)
async def codegraph_error_handler(request: Request, exc: CodeGraphError):
    """Map engine errors to HTTP responses."""
    if isinstance(exc, ValidationError):
        return JSONResponse(status_code=400, content={"error": exc.message})
    if isinstance(exc, NotFoundError):
        return JSONResponse(status_code=404, content={"error": exc.message})
    if isinstance(exc, ChatCompletionError):
        return JSONResponse(
            status_code=502,
            content={
                "error": SERVICE_ERROR,
                "pendingMessageId": exc.context.get("pending_message_id"),
                "sessionId": exc.context.get("session_id"),
            },
        )
    if isinstance(exc, LLMError):
        return JSONResponse(status_code=502, content={"error": SERVICE_ERROR})

    logger.error(
        f"Unhandled engine error on {request.url.path}",
        extra={"error": exc.message, "error_type": type(exc).__name__},
    )
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def get_engine() -> CodeGraphEngine:
    if not engine:
        raise HTTPException(status_code=503, detail="Engine not initialized")
    return engine


def dump(model: BaseModel) -> dict:
    """camelCase JSON-ready representation of a model."""
    return model.model_dump(mode="json", by_alias=True)


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    config: Config | None = getattr(app.state, "config", None)
    return HealthResponse(
        status="healthy" if engine else "initializing",
        engine_initialized=engine is not None,
        llm=f"{config.llm.provider}/{config.llm.model}" if config else "unknown",
        record_store=config.store.backend if config else "unknown",
    )


# Analysis endpoints
@app.post("/codegraph/analyze")
def analyze(request: AnalyzeRequest):
    """
    Build a CodeGraph from a flat file list.

    The graph is appended to the project's snapshot timeline. The endpoint is
    sync so the blocking snapshot write runs in the threadpool.
    """
    graph = get_engine().analyze(request)
    return dump(graph)


@app.post("/codegraph/explain")
async def explain(request: ExplainRequest):
    """Explain the architecture of an existing graph."""
    explanation = await get_engine().explain(
        request.project_id, request.graph.to_code_graph(request.project_id)
    )
    return dump(explanation)


@app.post("/codegraph/analysis")
async def create_analysis(request: AnalysisRequest, x_user_id: str = Header(...)):
    """
    Analyze, explain and persist a project for the calling user.

    Re-analysis of the same project replaces the stored graph in place.
    """
    record = await get_engine().analyze_and_explain(x_user_id, request)
    return dump(record)


@app.get("/codegraph/analyses")
async def list_analyses(x_user_id: str = Header(...)):
    """List the calling user's analyses, most recently updated first."""
    records = await get_engine().list_analyses(x_user_id)
    return [dump(record) for record in records]


@app.get("/codegraph/analyses/{analysis_id}")
async def get_analysis(analysis_id: str, x_user_id: str = Header(...)):
    record = await get_engine().get_analysis(analysis_id, x_user_id)
    return dump(record)


@app.delete("/codegraph/analyses/{analysis_id}")
async def delete_analysis(analysis_id: str, x_user_id: str = Header(...)):
    """Delete an analysis together with its chat sessions."""
    if not await get_engine().delete_analysis(analysis_id, x_user_id):
        raise HTTPException(status_code=404, detail="Analysis not found")
    return {"success": True, "analysisId": analysis_id}


# Timeline endpoints
@app.post("/architecture/compare")
async def compare(request: CompareRequest):
    """Diff two graphs and explain why the architecture evolved."""
    result = await get_engine().compare(
        request.current_graph.to_code_graph(),
        request.historical_graph.to_code_graph(),
    )
    return dump(result)


@app.get("/codegraph/snapshots/{project_id}")
def list_snapshots(project_id: str):
    """Snapshot timeline of a project, newest first."""
    return [dump(graph) for graph in get_engine().timeline(project_id)]


@app.get("/codegraph/snapshots/{project_id}/compare")
async def compare_snapshots(
    project_id: str,
    current: datetime = Query(..., description="generatedAt of the current snapshot"),
    historical: datetime = Query(..., description="generatedAt of the historical snapshot"),
):
    """Compare two stored snapshots of a project."""
    result = await get_engine().compare_snapshots(project_id, current, historical)
    return dump(result)


# Chat endpoints
@app.post("/codegraph/chat/send")
async def chat_send(request: ChatSendRequest):
    """Answer a question from caller-supplied context; nothing is persisted."""
    reply = await get_engine().chat_send(request)
    return {"reply": reply}


@app.post("/codegraph/chat/ask")
async def chat_ask(request: ChatAskRequest, x_user_id: str = Header(...)):
    """
    Ask a question about one of the caller's analyses.

    Starts a session when no sessionId is given. On provider failure the
    question stays in the session and its id is returned as pendingMessageId.
    """
    exchange = await get_engine().ask(
        x_user_id, request.analysis_id, request.question, session_id=request.session_id
    )
    return {
        "sessionId": exchange.session.id,
        "title": exchange.session.title,
        "reply": exchange.reply.content,
    }


@app.get("/codegraph/sessions")
async def list_sessions(
    x_user_id: str = Header(...),
    analysis_id: str | None = Query(default=None, alias="analysisId"),
):
    sessions = await get_engine().list_sessions(x_user_id, analysis_id)
    return [dump(session) for session in sessions]


@app.get("/codegraph/sessions/{session_id}/messages")
async def get_session_messages(
    session_id: str,
    x_user_id: str = Header(...),
    limit: int | None = Query(default=None, ge=1, le=500),
):
    messages = await get_engine().get_messages(session_id, x_user_id, limit=limit)
    return [dump(message) for message in messages]


@app.patch("/codegraph/sessions/{session_id}")
async def rename_session(
    session_id: str, request: RenameSessionRequest, x_user_id: str = Header(...)
):
    session = await get_engine().rename_session(session_id, x_user_id, request.title)
    return dump(session)


@app.delete("/codegraph/sessions/{session_id}")
async def delete_session(session_id: str, x_user_id: str = Header(...)):
    """Delete a session and all of its messages."""
    if not await get_engine().delete_session(session_id, x_user_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True, "sessionId": session_id}


@app.delete("/codegraph/sessions/{session_id}/messages/{message_id}")
async def retract_message(session_id: str, message_id: str, x_user_id: str = Header(...)):
    """Remove a message whose answer never arrived."""
    if not await get_engine().retract_message(session_id, message_id, x_user_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return {"success": True, "messageId": message_id}


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "CodeGraph API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
