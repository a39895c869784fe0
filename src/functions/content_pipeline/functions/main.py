"""Cloud Function entry points for the content pipeline stages and housekeeping jobs."""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict

import flask
import functions_framework

# Ensure project root is available on import path
project_root = Path(__file__).parent.parent.parent.parent.parent.absolute()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.shared.utils.config_validator import ConfigurationError
from src.shared.utils.env import load_env
from src.shared.utils.logging import setup_logging

from src.functions.content_pipeline.core.contracts.errors import RecordStoreError
from src.functions.content_pipeline.core.orchestration.factory import PipelineFactory

load_env()
setup_logging(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

Job = Callable[[PipelineFactory], Dict[str, Any]]


def build_factory() -> PipelineFactory:
    return PipelineFactory.from_env()


def shape_content_handler(request: flask.Request) -> flask.Response:
    """Stage one: pending -> content_ready."""

    return _handle(request, "shape_content", lambda factory: factory.content_worker().run_batch().to_response())


def generate_script_handler(request: flask.Request) -> flask.Response:
    """Stage two: content_ready -> script_generated, fanning out shared records."""

    return _handle(request, "generate_script", lambda factory: factory.script_worker().run_batch().to_response())


def generate_audio_handler(request: flask.Request) -> flask.Response:
    """Stage three: script_generated -> ready."""

    return _handle(request, "generate_audio", lambda factory: factory.audio_worker().run_batch().to_response())


def cleanup_stuck_content_handler(request: flask.Request) -> flask.Response:
    return _handle(request, "cleanup_stuck_content", lambda factory: factory.stuck_recovery().run().to_response())


def expire_content_handler(request: flask.Request) -> flask.Response:
    return _handle(request, "expire_content", lambda factory: factory.expiration().run().to_response())


def pipeline_health_handler(request: flask.Request) -> flask.Response:
    return _handle(request, "pipeline_health", lambda factory: factory.monitor().check().to_response())


def _handle(request: flask.Request, component: str, job: Job) -> flask.Response:
    if request.method == "OPTIONS":
        return _cors_response({}, status=204)

    if request.method == "GET":
        return _cors_response(
            {
                "status": "healthy",
                "component": component,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    if request.method != "POST":
        return _error_response(f"Method {request.method} not allowed. Use POST or GET.", status=405)

    logger.info("Received %s invocation", component)
    try:
        factory = build_factory()
    except ConfigurationError as exc:
        logger.error("Configuration error for %s: %s", component, exc)
        return _error_response(f"Configuration error: {exc}", status=500)

    try:
        body = job(factory)
    except RecordStoreError as exc:
        logger.error("%s could not read its batch: %s", component, exc)
        return _error_response(str(exc), status=500)
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s failed", component)
        return _error_response(f"{component} failed: {exc}", status=500)

    logger.info(
        "%s finished: processed=%s failed=%s",
        component,
        body.get("processed_count", body.get("cleaned_count", body.get("expired_count"))),
        body.get("failed_count", len(body.get("errors", []) or [])),
    )
    return _cors_response(body)


def _cors_response(body: Dict[str, Any], status: int = 200) -> flask.Response:
    response = flask.make_response(json.dumps(body, ensure_ascii=False, default=str), status)
    headers = response.headers
    headers["Content-Type"] = "application/json"
    headers["Access-Control-Allow-Origin"] = "*"
    headers["Access-Control-Allow-Methods"] = "GET,POST,OPTIONS"
    headers["Access-Control-Allow-Headers"] = "authorization, x-client-info, apikey, content-type"
    return response


def _error_response(message: str, status: int) -> flask.Response:
    return _cors_response({"success": False, "error": message}, status=status)


@functions_framework.http
def shape_content(request: flask.Request):
    return shape_content_handler(request)


@functions_framework.http
def generate_script(request: flask.Request):
    return generate_script_handler(request)


@functions_framework.http
def generate_audio(request: flask.Request):
    return generate_audio_handler(request)


@functions_framework.http
def cleanup_stuck_content(request: flask.Request):
    return cleanup_stuck_content_handler(request)


@functions_framework.http
def expire_content(request: flask.Request):
    return expire_content_handler(request)


@functions_framework.http
def pipeline_health(request: flask.Request):
    return pipeline_health_handler(request)
