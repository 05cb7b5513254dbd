import os

from dotenv import load_dotenv
load_dotenv()
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from errors import TrackerError
from logs import get_logger
from service import MutationResult, ProjectStateService
from store import StateStore


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


STATE_FILE         = os.getenv("STATE_FILE", "./counter-state.json")
LOG_FILE           = os.getenv("LOG_FILE", "./debug.log")
LOG_LEVEL          = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON           = env_flag("LOG_JSON")
STRICT_PERSISTENCE = env_flag("STRICT_PERSISTENCE")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Expose-Headers": "X-State-Persisted",
}

log = get_logger("api")

app = FastAPI()


@app.on_event("startup")
def startup():
    store = StateStore(STATE_FILE)
    app.state.service = ProjectStateService(store, strict_persistence=STRICT_PERSISTENCE)


async def get_service(request: Request) -> ProjectStateService:
    return request.app.state.service


def state_response(result: MutationResult) -> JSONResponse:
    return JSONResponse(
        content=result.state.to_json(),
        headers={"X-State-Persisted": "true" if result.persisted else "false"},
    )


@app.middleware("http")
async def cors(request: Request, call_next):
    log.info("request", method=request.method, path=request.url.path)
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(TrackerError)
async def tracker_error(request: Request, exc: TrackerError):
    log.warning(
        "request_rejected",
        path=request.url.path,
        error=exc.message,
        kind=type(exc).__name__,
    )
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def not_found(request: Request, exc: StarletteHTTPException):
    # unknown paths and unsupported methods both answer 404
    log.info("route_not_found", method=request.method, path=request.url.path)
    return PlainTextResponse("Not Found", status_code=404)


@app.exception_handler(Exception)
async def server_error(request: Request, exc: Exception):
    log.exception("server_error", path=request.url.path)
    return PlainTextResponse("Internal Server Error", status_code=500)


@app.get("/state")
async def get_state(service: Annotated[ProjectStateService, Depends(get_service)]):
    state = service.get_state()
    log.info(
        "sending_state",
        active=state.active_project.name if state.active_project else None,
        delivered=len(state.delivered_projects),
    )
    return JSONResponse(content=state.to_json())


@app.post("/start-project")
async def start_project(
    request: Request,
    service: Annotated[ProjectStateService, Depends(get_service)],
):
    try:
        body = await request.json()
    except ValueError as exc:
        log.error("start_project_bad_body", error=str(exc))
        return JSONResponse({"error": "Failed to process request."}, status_code=500)
    if not isinstance(body, dict):
        body = {}
    result = service.start_project(body.get("name"), body.get("deadlineDays"))
    return state_response(result)


@app.post("/deliver-project")
async def deliver_project(service: Annotated[ProjectStateService, Depends(get_service)]):
    return state_response(service.deliver_project())


@app.post("/reset-state")
async def reset_state(service: Annotated[ProjectStateService, Depends(get_service)]):
    return state_response(service.reset_state())
