"""
Ponto de entrada principal da API da igreja.
Inicialização : uvicorn igreja_api.main:app --reload
"""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import igreja_api.models  # noqa: F401 (registra todos os modelos no Base.metadata antes dos routers)
from igreja_api.config import settings
from igreja_api.dependencies import client_ip
from igreja_api.routers import (
    atividades,
    auth,
    avaliacoes,
    cargos,
    configuracoes,
    cultos,
    departamentos,
    escalas,
    formas_conhecimento,
    funcoes,
    perfis,
    pessoas,
    tipos_cultos,
    usuarios,
    visitantes,
)

logger = logging.getLogger(__name__)

API_NAME = "Igreja API"
API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ciclo de vida da aplicação : configura o logging na inicialização."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("%s %s iniciada (ambiente : %s)", API_NAME, API_VERSION, settings.ENV)
    yield
    logger.info("%s encerrada", API_NAME)


app = FastAPI(
    title=API_NAME,
    description="API de administração da igreja : cultos, escalas, pessoas, visitantes e avaliações",
    version=API_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Registra cada requisição na entrada e na saída, com status e duração."""
    inicio = time.perf_counter()
    ip = client_ip(request)
    logger.info("%s %s - %s", request.method, request.url.path, ip)
    response = await call_next(request)
    duracao_ms = (time.perf_counter() - inicio) * 1000
    logger.info(
        "%s %s - %s - %.0fms", request.method, request.url.path, response.status_code, duracao_ms
    )
    return response


app.include_router(auth.router)
app.include_router(usuarios.router)
app.include_router(perfis.router)
app.include_router(pessoas.router)
app.include_router(cultos.router)
app.include_router(escalas.router)
app.include_router(atividades.router)
app.include_router(visitantes.router)
app.include_router(avaliacoes.router)
app.include_router(funcoes.router)
app.include_router(departamentos.router)
app.include_router(cargos.router)
app.include_router(tipos_cultos.router)
app.include_router(formas_conhecimento.router)
app.include_router(configuracoes.router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Envelope de erro uniforme ; um `detail` dict é mesclado ao corpo."""
    if isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
    else:
        content = {"success": False, "error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Erros de validação do corpo/parâmetros → 400 com o detalhe por campo."""
    detalhes = []
    for erro in exc.errors():
        campo = ".".join(str(parte) for parte in erro.get("loc", ()) if parte not in ("body", "query", "path"))
        mensagem = str(erro.get("msg", "")).removeprefix("Value error, ")
        detalhes.append({"campo": campo, "mensagem": mensagem})
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Dados inválidos", "detalhes": detalhes},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepta toda exceção não tratada para que a resposta 500 passe pelo
    CORSMiddleware e mantenha o envelope de erro.
    Em produção a mensagem original não é exposta.
    """
    logger.error("Exceção não tratada em %s %s : %s", request.method, request.url.path, exc, exc_info=True)
    content = {"success": False, "error": "Erro interno do servidor"}
    if not settings.is_production:
        content["detalhes"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.get("/api/health", tags=["Saúde"])
def health_check():
    """Verifica que a API está operacional."""
    return {"status": "ok", "service": API_NAME, "version": API_VERSION}


@app.get("/api", tags=["Saúde"])
def api_info():
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "docs": "/api/docs",
        "endpoints": {
            "auth": "/api/auth",
            "usuarios": "/api/usuarios",
            "perfis": "/api/perfis",
            "pessoas": "/api/pessoas",
            "cultos": "/api/cultos",
            "escalas": "/api/escalas",
            "atividades": "/api/atividades",
            "visitantes": "/api/visitantes",
            "avaliacoes": "/api/avaliacoes",
            "funcoes": "/api/funcoes",
            "departamentos": "/api/departamentos",
            "cargos": "/api/cargos",
            "tipos_cultos": "/api/tipos-cultos",
            "formas_conhecimento": "/api/formas-conhecimento",
            "configuracoes": "/api/configuracoes",
        },
    }
