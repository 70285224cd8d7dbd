from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field

from ...api import call_api, get_api_functions
from ...config import get_settings

logger = logging.getLogger(__name__)

app = FastAPI(title="slotwise", version="0.1.0", default_response_class=ORJSONResponse)


class ApiCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)


@app.get("/api/functions")
async def list_api_functions() -> ORJSONResponse:
    return ORJSONResponse({"functions": [func.describe() for func in get_api_functions()]})


@app.post("/api/functions/{function_name}")
async def invoke_api_function(function_name: str, request: ApiCallRequest) -> ORJSONResponse:
    try:
        result = call_api(function_name, **request.arguments)
    except KeyError as exc:
        logger.warning("API lookup failed for %s: %s", function_name, exc)
        raise HTTPException(status_code=404, detail=str(exc.args[0] if exc.args else exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("API function %s failed", function_name)
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    logger.debug("API function %s executed successfully", function_name)
    return ORJSONResponse({"name": function_name, "result": result})


def run_local_server(host: Optional[str] = None, port: Optional[int] = None) -> None:
    import asyncio

    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    settings = get_settings().server
    config = Config()
    config.bind = [f"{host or settings.host}:{port or settings.port}"]
    logger.info("Serving slotwise API on %s", config.bind[0])
    asyncio.run(serve(app, config))
