"""HTTP API — compiles confirmed process summaries into documents.

Endpoints:
    POST /api/processes/confirm — summary → Markdown + BPMN (process entry payload)
    POST /api/processes/bpmn    — summary → BPMN XML download
    GET  /health                — Liveness probe
"""

from __future__ import annotations

import asyncio
import hmac
import json
import logging
from typing import Any, Optional

from aiohttp import web

from .bpmn_generator import generate_bpmn_xml
from .config import AppConfig
from .confirm import BPMN_FAILURE_MESSAGE, ProcessGenerationError, confirm_summary
from .export import sanitize_title
from .llm_client import LLMClient
from .schemas import ProcessSummary, SummaryValidationError

logger = logging.getLogger(__name__)


class DocumentServer:
    """HTTP server that turns process summaries into BPMN and Markdown."""

    def __init__(self, config: AppConfig, llm: Optional[LLMClient] = None) -> None:
        self._config = config
        self._llm = llm
        self._app = web.Application()
        self._app.router.add_post('/api/processes/confirm', self._handle_confirm)
        self._app.router.add_post('/api/processes/bpmn', self._handle_bpmn)
        self._app.router.add_get('/health', self._handle_health)
        self._runner: web.AppRunner | None = None

    # ── Lifecycle ─────────────────────────────────────────

    async def start(self) -> None:
        """Start the HTTP server and serve until cancelled."""
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(
            self._runner,
            self._config.http.host,
            self._config.http.port,
        )
        await site.start()
        logger.info(
            "Document server listening on %s:%d (llm=%s)",
            self._config.http.host,
            self._config.http.port,
            'on' if self._llm else 'off',
        )
        try:
            while True:
                await asyncio.sleep(3600)
        except asyncio.CancelledError:
            pass
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Gracefully shutdown the server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Document server stopped")

    # ── Health check ──────────────────────────────────────

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})

    # ── Confirmation ──────────────────────────────────────

    async def _handle_confirm(self, request: web.Request) -> web.Response:
        """Compile Markdown + BPMN for a confirmed summary."""
        denied = self._check_token(request)
        if denied:
            return denied

        payload, error = await self._read_json(request)
        if error:
            return error
        if not isinstance(payload, dict):
            return _error(400, "Expected a JSON object")

        summary, error = _parse_summary(payload.get('summary'))
        if error:
            return error

        language = str(payload.get('language') or self._config.default_language)
        title = payload.get('title')
        if title is not None and not isinstance(title, str):
            return _error(400, "title: expected a string")

        try:
            documents = await confirm_summary(
                summary,
                llm=self._llm,
                language=language,
                title=title,
                max_attempts=self._config.llm.max_attempts,
            )
        except ProcessGenerationError as exc:
            return _error(500, exc.user_message)

        logger.info("Confirmed process %r", documents.title)
        return web.json_response({
            "processEntry": {
                "title": documents.title,
                "status": "COMPLETED",
                "markdownContent": documents.markdown,
                "bpmnXml": documents.bpmn_xml,
            },
        })

    # ── BPMN only ─────────────────────────────────────────

    async def _handle_bpmn(self, request: web.Request) -> web.Response:
        """Return the BPMN document for a summary as an XML download."""
        denied = self._check_token(request)
        if denied:
            return denied

        payload, error = await self._read_json(request)
        if error:
            return error

        summary, error = _parse_summary(payload)
        if error:
            return error

        try:
            xml = generate_bpmn_xml(summary)
        except Exception as exc:
            logger.error("BPMN generation failed for %r: %s", summary.process_name, exc)
            return _error(500, BPMN_FAILURE_MESSAGE)

        filename = f'{sanitize_title(summary.process_name)}.bpmn'
        return web.Response(
            text=xml,
            content_type='application/xml',
            charset='utf-8',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'},
        )

    # ── Helpers ───────────────────────────────────────────

    def _check_token(self, request: web.Request) -> web.Response | None:
        """Bearer header or ?token= query param; disabled when no token is set."""
        expected_token = self._config.http.api_token
        if not expected_token:
            return None
        auth_header = request.headers.get('Authorization', '')
        token = (
            auth_header.removeprefix('Bearer ').strip()
            or request.query.get('token', '')
        )
        if not hmac.compare_digest(token.encode(), expected_token.encode()):
            logger.warning("Invalid API token from %s", request.remote)
            return _error(401, "Invalid token")
        return None

    @staticmethod
    async def _read_json(request: web.Request) -> tuple[Any, web.Response | None]:
        try:
            return await request.json(), None
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None, _error(400, "Invalid JSON")


def _parse_summary(raw: Any) -> tuple[ProcessSummary | None, web.Response | None]:
    try:
        return ProcessSummary.from_dict(raw), None
    except SummaryValidationError as exc:
        logger.info("Rejected summary: %s", exc)
        return None, _error(400, f"Invalid summary: {exc}")


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"error": message}, status=status)
