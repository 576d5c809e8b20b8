from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from . import service
from .config import load_settings
from .errors import BlackIceError, GatewayError
from .inventory.gateway import Ec2Gateway
from .inventory.resolver import IdentityResolver
from .obs.metrics import prometheus_latest
from .utils.logging import get_logger

app = FastAPI(title="blackice: key-pair access scanner")
log = get_logger()


@lru_cache(maxsize=8)
def _gateway(region: str, profile: Optional[str]) -> Ec2Gateway:
    return Ec2Gateway(region_name=region, profile_name=profile)


def get_resolver() -> IdentityResolver:
    s = load_settings()
    return IdentityResolver(_gateway(s.aws_region, s.aws_profile))


def _identity_path() -> Path:
    path = load_settings().identity_key
    if not path:
        raise HTTPException(status_code=503, detail="identity_not_configured")
    return Path(path)


def _unreadable_identity(path: Path, e: OSError) -> HTTPException:
    log.error("cannot read identity key %s: %s", path, e)
    return HTTPException(status_code=503, detail="identity_not_configured")


def _json(payload) -> Response:
    return Response(content=service.render_json(payload), media_type="application/json")


@app.exception_handler(BlackIceError)
async def blackice_error(request: Request, exc: BlackIceError):
    if isinstance(exc, GatewayError):
        log.warning("%s %s -> %s", request.method, request.url.path, exc)
    else:
        log.info("%s %s -> %s", request.method, request.url.path, exc.code)
    return JSONResponse({"error": exc.code, "detail": str(exc)}, status_code=exc.status_code)


@app.get("/__health")
async def health():
    return {"status": "ok"}


@app.post("/fingerprint")
async def fingerprint(request: Request):
    pem = await request.body()
    return {"fingerprint": await run_in_threadpool(service.derive_fingerprint, pem)}


@app.get("/fingerprint")
async def own_fingerprint():
    path = _identity_path()
    try:
        fp = await run_in_threadpool(service.derive_fingerprint_file, path)
    except OSError as e:
        raise _unreadable_identity(path, e) from e
    return {"fingerprint": fp}


@app.post("/scan")
async def scan(request: Request, resolver: IdentityResolver = Depends(get_resolver)):
    pem = await request.body()
    result = await run_in_threadpool(service.scan, resolver, pem)
    return _json(result)


@app.get("/scan")
async def own_scan(resolver: IdentityResolver = Depends(get_resolver)):
    path = _identity_path()
    try:
        pem = await run_in_threadpool(path.read_bytes)
    except OSError as e:
        raise _unreadable_identity(path, e) from e
    result = await run_in_threadpool(service.scan, resolver, pem)
    return _json(result)


@app.get("/keypairs")
async def keypairs(resolver: IdentityResolver = Depends(get_resolver)):
    return _json(await run_in_threadpool(service.list_key_pairs, resolver))


@app.get("/instances/{key_name}")
async def instances(key_name: str, resolver: IdentityResolver = Depends(get_resolver)):
    return _json(await run_in_threadpool(service.list_instances, resolver, key_name))


@app.get("/metrics")
def metrics():
    body, content_type = prometheus_latest()
    return Response(body, media_type=content_type)
