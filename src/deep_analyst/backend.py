"""
FastAPI backend for Deep Analyst.

Exposes:
- Research endpoint (Gemini with Google Search grounding)
- Report history endpoints for the web UI
- Markdown rendering and file export helpers
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .errors import (
    ConfigurationError,
    RateLimitError,
    ReportNotFoundError,
    SearchInProgressError,
)
from .export import export_report
from .markdown import format_markdown
from .models import AppState, ContentUpdate, RenderResponse, ResearchReport, ResearchRequest
from .state import ResearchSession
from .storage import LocalStorage

logger = logging.getLogger(__name__)


def create_app(session: Optional[ResearchSession] = None) -> FastAPI:
    if session is None:
        session = ResearchSession(LocalStorage(settings.storage_path))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not settings.get_api_key():
            logger.warning(
                "%s is not set; research requests will fail until it is configured.",
                settings.api_key_env,
            )
        logger.info("Loaded %d reports from storage.", len(session.state.reports))
        yield

    app = FastAPI(title="Deep Analyst", version="0.1.0", lifespan=lifespan)
    app.state.session = session

    # Allow local UIs (Streamlit) to talk to the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _get(report_id: str) -> ResearchReport:
        try:
            return session.get_report(report_id)
        except ReportNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Unknown report id") from exc

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/state", response_model=AppState)
    async def get_state() -> AppState:
        return session.state

    @app.post("/research", response_model=ResearchReport)
    async def research(payload: ResearchRequest) -> ResearchReport:
        """
        Run a grounded research query and store the resulting report.
        """
        if not payload.query.strip():
            raise HTTPException(status_code=400, detail="Query must not be empty.")
        try:
            return await session.search(payload.query)
        except SearchInProgressError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        except ConfigurationError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        except RateLimitError as exc:
            raise HTTPException(status_code=429, detail=str(exc)) from exc
        except Exception as exc:  # pylint: disable=broad-except
            raise HTTPException(status_code=502, detail=session.state.error or str(exc)) from exc

    @app.get("/reports", response_model=List[ResearchReport])
    async def list_reports() -> List[ResearchReport]:
        return session.state.reports

    @app.get("/reports/{report_id}", response_model=ResearchReport)
    async def get_report(report_id: str) -> ResearchReport:
        return _get(report_id)

    @app.post("/reports/{report_id}/select", response_model=AppState)
    async def select_report(report_id: str) -> AppState:
        _get(report_id)
        session.select_report(report_id)
        return session.state

    @app.put("/reports/{report_id}", response_model=ResearchReport)
    async def save_report(report_id: str, payload: ContentUpdate) -> ResearchReport:
        _get(report_id)
        return session.save_report_content(report_id, payload.content)

    @app.delete("/reports/{report_id}", response_model=AppState)
    async def delete_report(report_id: str, confirm: bool = False) -> AppState:
        _get(report_id)
        if not session.delete_report(report_id, confirmed=confirm):
            raise HTTPException(status_code=400, detail="Deletion must be confirmed.")
        return session.state

    @app.delete("/error", response_model=AppState)
    async def dismiss_error() -> AppState:
        session.dismiss_error()
        return session.state

    @app.get("/reports/{report_id}/export")
    async def export(report_id: str, format: Literal["md", "txt"] = "md") -> Response:
        exported = export_report(_get(report_id), format)
        return Response(
            content=exported.data,
            media_type=exported.media_type,
            headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
        )

    @app.post("/render", response_model=RenderResponse)
    async def render(payload: ContentUpdate) -> RenderResponse:
        return RenderResponse(html=format_markdown(payload.content))

    return app


app = create_app()
