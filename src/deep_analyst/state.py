"""
Application state for a Deep Analyst session.

`ResearchSession` keeps the report history, the currently displayed report,
the loading flag and the last error. Only the report list is persisted; it is
written to storage every time it changes.
"""

import logging
from typing import Awaitable, Callable, Optional

from .errors import ReportNotFoundError, SearchInProgressError
from .gemini_service import perform_deep_research
from .models import AppState, ResearchReport
from .storage import LocalStorage, load_reports, save_reports

logger = logging.getLogger(__name__)

ResearchFn = Callable[[str], Awaitable[ResearchReport]]

UNEXPECTED_ERROR = "An unexpected error occurred. Please check your connection."


class ResearchSession:
    def __init__(
        self,
        storage: LocalStorage,
        research: ResearchFn = perform_deep_research,
        storage_key: Optional[str] = None,
    ) -> None:
        self._storage = storage
        self._research = research
        self._storage_key = storage_key
        self.state = AppState(reports=load_reports(storage, storage_key))

    def _persist(self) -> None:
        save_reports(self._storage, self.state.reports, self._storage_key)

    def get_report(self, report_id: str) -> ResearchReport:
        for report in self.state.reports:
            if report.id == report_id:
                return report
        raise ReportNotFoundError(report_id)

    async def search(self, query: str) -> ResearchReport:
        """
        Run one research query.

        Only one query may be in flight at a time. On failure the error
        message is kept in the state and the exception is re-raised.
        """
        query = (query or "").strip()
        if not query:
            raise ValueError("Query must not be empty.")
        if self.state.loading:
            raise SearchInProgressError("A research query is already running.")

        self.state.loading = True
        self.state.error = None
        self.state.current_report = None
        logger.info("Starting research for %r", query)

        try:
            report = await self._research(query)
            # Storage is written before the in-memory list changes.
            reports = [report, *self.state.reports]
            save_reports(self._storage, reports, self._storage_key)
        except Exception as exc:
            self.state.error = str(exc) or UNEXPECTED_ERROR
            raise
        finally:
            self.state.loading = False

        self.state.reports = reports
        self.state.current_report = report
        return report

    def select_report(self, report_id: str) -> ResearchReport:
        report = self.get_report(report_id)
        self.state.current_report = report
        self.state.error = None
        return report

    def delete_report(self, report_id: str, confirmed: bool = False) -> bool:
        """Remove a report. Nothing happens unless the user confirmed."""
        self.get_report(report_id)
        if not confirmed:
            return False

        self.state.reports = [r for r in self.state.reports if r.id != report_id]
        current = self.state.current_report
        if current is not None and current.id == report_id:
            self.state.current_report = None
        self._persist()
        logger.info("Deleted report %s", report_id)
        return True

    def save_report_content(self, report_id: str, content: str) -> ResearchReport:
        updated = self.get_report(report_id).model_copy(update={"content": content})
        self.state.reports = [updated if r.id == report_id else r for r in self.state.reports]
        current = self.state.current_report
        if current is not None and current.id == report_id:
            self.state.current_report = current.model_copy(update={"content": content})
        self._persist()
        logger.debug("Saved edited content for report %s", report_id)
        return updated

    def dismiss_error(self) -> None:
        self.state.error = None
