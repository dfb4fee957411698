"""
BioPeak 分析 API 主应用文件。

本文件是FastAPI应用的入口点，负责：
1. 创建FastAPI应用实例并配置 CORS
2. 注册统一的错误处理（所有错误返回 {"success": false, "error": "..."}）
3. 注册各个模块的路由
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import setup_logging
from .config import LOG_LEVEL, get_cors_origins
from .errors import BioPeakError

from .api.segments import router as segments_router
from .api.overtraining import router as overtraining_router
from .api.gas import router as gas_router

setup_logging(LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="BioPeak 分析 API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(BioPeakError)
async def biopeak_error_handler(request: Request, exc: BioPeakError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """请求参数缺失或格式错误统一返回 400"""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return error_response(400, "; ".join(parts) or "Invalid request")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("[api][unhandled] %s %s", request.method, request.url.path)
    return error_response(500, "Internal server error")


# 路由注册
app.include_router(segments_router)
app.include_router(overtraining_router)
app.include_router(gas_router)
