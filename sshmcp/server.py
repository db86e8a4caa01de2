#!/usr/bin/env python3
"""
HTTP front-end

Exposes the dispatcher over HTTP for callers that cannot use a stdin/stdout
transport. The envelope is identical: POST /mcp takes a request envelope and
always answers 200 with a response envelope, whose status carries the outcome.
"""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import VERSION, Settings
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class ToolSummary(BaseModel):
    name: str
    description: str
    version: str
    author: str
    tags: List[str] = []


class ToolListResponse(BaseModel):
    total: int
    tools: List[ToolSummary]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    dispatcher = Dispatcher(settings or Settings.from_env())

    app = FastAPI(
        title="ssh-mcp",
        description="Machine Chat Protocol tool dispatcher",
        version=VERSION,
    )
    app.state.dispatcher = dispatcher

    async def _call_or_raise(tool: str, args: dict):
        response = await dispatcher.call(tool, args)
        if response.error is not None:
            raise HTTPException(
                status_code=response.status.code if response.status.code >= 400 else 500,
                detail=response.error.message,
            )
        return response

    @app.get("/")
    async def root():
        return {
            "service": "ssh-mcp",
            "version": VERSION,
            "endpoints": {
                "request": "/mcp",
                "list_tools": "/tools",
                "describe": "/tools/{tool_name}",
                "schema": "/tools/{tool_name}/schema",
                "health": "/health",
            },
        }

    @app.get("/health")
    async def health():
        return {"status": "healthy", "tools_loaded": len(dispatcher.registry().list())}

    @app.post("/mcp")
    async def handle_envelope(request: Request):
        body = await request.body()
        response = await dispatcher.handle(body)
        return JSONResponse(response.to_dict())

    @app.get("/tools", response_model=ToolListResponse)
    async def list_tools(category: Optional[str] = None):
        args = {"category": category} if category else {}
        response = await _call_or_raise("meta.discover", args)
        return ToolListResponse(
            total=response.result["count"],
            tools=[ToolSummary(**tool) for tool in response.result["tools"]],
        )

    @app.get("/tools/{tool_name}")
    async def describe_tool(tool_name: str):
        response = await _call_or_raise("meta.describe", {"tool": tool_name})
        return response.result

    @app.get("/tools/{tool_name}/schema")
    async def tool_schema(tool_name: str):
        response = await _call_or_raise("meta.schema", {"tool": tool_name})
        return response.result["schema"]

    return app


load_dotenv()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    uvicorn.run(
        app,
        host=os.getenv("MCP_HTTP_HOST", "127.0.0.1"),
        port=int(os.getenv("MCP_HTTP_PORT", "8000")),
    )
