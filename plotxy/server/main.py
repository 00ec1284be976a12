from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Literal

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

import matplotlib
matplotlib.use("Agg")  # must come before Figure import

from matplotlib import font_manager

from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from plotxy.builder import PlotModel, render_table
from plotxy.errors import PlotxyError
from plotxy.parsing import parse_table
from plotxy.render import MIME_TYPES
from plotxy.spec import OutputFormat, PlotSpec

_LOGGER = logging.getLogger(__name__)


# -----------------------
# Request models
# -----------------------

class RenderRequest(BaseModel):
    table_text: str = Field(..., min_length=1)
    # same shape as PlotSpec.to_dict(); input.path is ignored
    options: Dict[str, Any] = Field(default_factory=dict)
    format: Literal["png", "svg"] = "png"


# -----------------------
# App creation
# -----------------------

app = FastAPI(title="plotxy render service")


# -----------------------
# Middleware: max body size
# -----------------------

class MaxBodySizeMiddleware:
    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> dict:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                body = message.get("body", b"") or b""
                received += len(body)
                if received > self.max_bytes:
                    response = PlainTextResponse("Request body too large", status_code=413)
                    await response(scope, receive, send)
                    return {"type": "http.disconnect"}
            return message

        await self.app(scope, limited_receive, send)


app.add_middleware(MaxBodySizeMiddleware, max_bytes=5_000_000)


# -----------------------
# Middleware: rate limiting
# -----------------------

limiter = Limiter(key_func=get_remote_address, default_limits=["120/minute"])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# -----------------------
# Helpers
# -----------------------

def _parse_spec(req: RenderRequest) -> PlotSpec:
    options = dict(req.options)
    options["svg"] = req.format == OutputFormat.SVG.value
    # titles default to the output name, which means nothing here
    options.setdefault("outfile", f"plot.{req.format}")
    try:
        return PlotSpec.from_dict(options)
    except PlotxyError as e:
        raise HTTPException(status_code=400, detail=f"Invalid options: {e}")


def _render(req: RenderRequest) -> tuple[bytes, str, PlotModel]:
    spec = _parse_spec(req)
    try:
        table = parse_table(
            req.table_text.encode("utf-8"),
            delimiter=spec.input.delimiter_char(),
            header=spec.input.header,
            skip=spec.input.skip,
        )
        payload, model = render_table(table, spec)
    except PlotxyError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        _LOGGER.exception("render failed")
        raise HTTPException(status_code=500, detail=f"Render failed: {type(e).__name__}: {e}")

    return payload, MIME_TYPES[spec.output_format], model


# -----------------------
# Routes
# -----------------------

@app.get("/health")
def health():
    return {"ok": True}


@app.post("/render")
@limiter.limit("20/minute")
def render(request: Request, req: RenderRequest):
    payload, mime, model = _render(req)
    headers: Dict[str, str] = {}
    if model.missing:
        headers["X-Plot-Warnings"] = f"{model.missing} row(s) with NA values plotted at 0 0"
    return Response(content=payload, media_type=mime, headers=headers)


@app.post("/render_json")
@limiter.limit("20/minute")
def render_json(request: Request, req: RenderRequest):
    payload, mime, model = _render(req)
    return JSONResponse(
        {
            "mime": mime,
            "format": req.format,
            "payload_base64": base64.b64encode(payload).decode("ascii"),
            "primitives": len(model.primitives),
            "missing": model.missing,
            "x_domain": [model.coords.x.min, model.coords.x.max, model.coords.x.scale.value],
            "y_domain": [model.coords.y.min, model.coords.y.max, model.coords.y.scale.value],
        }
    )


@app.get("/meta/fonts")
def meta_fonts():
    names = sorted({f.name for f in font_manager.fontManager.ttflist if getattr(f, "name", None)})
    return JSONResponse(names)
