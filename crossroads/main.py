import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import APIRouter, FastAPI, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crossroads.application.assistant import build_reply
from crossroads.application.commands import (
    SetDensityCommand, SetMaxSpeedCommand, PredictSpeedCommand, ResetSimulationCommand
)
from crossroads.application.gateway import ChatGateway
from crossroads.domain.errors import UnknownDirectionError, InvalidParameterError
from crossroads.domain.models import (
    Direction, DirectionStatus, MaxSpeedUpdate, MaxSpeedResult, DensityUpdate, DensityResult,
    SpeedPrediction, AssistantRequest, AssistantReply, ErrorResult
)
from crossroads.kernel.simulation_kernel import SimulationKernel
from crossroads.logging_setup import setup_logging
from crossroads.domain import config

logger = logging.getLogger(__name__)

router = APIRouter()

async def run_simulation(kernel: SimulationKernel, gateway: ChatGateway, interval: float):
    """Advances the simulation once per interval and pushes the snapshot to every client"""
    while True:
        start_time = time.time()

        try:
            kernel.run_tick()
            await gateway.publish_traffic()
        except Exception:
            # A failed tick is skipped, the loop keeps serving clients
            logger.exception("Simulation tick %s failed", kernel.state.tick_id)

        # Sleep to keep a steady tick rate
        elapsed = time.time() - start_time
        await asyncio.sleep(max(0.0, interval - elapsed))

def create_app(kernel: Optional[SimulationKernel] = None,
               tick_interval: Optional[float] = config.TICK_INTERVAL) -> FastAPI:
    """Builds the app. A falsy tick_interval disables the background loop."""
    kernel = kernel or SimulationKernel()
    gateway = ChatGateway(kernel)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if not kernel.initialized:
            kernel.initialize(config.SIMULATION_SEED)
        loop_task = None
        if tick_interval:
            loop_task = asyncio.create_task(run_simulation(kernel, gateway, tick_interval))
        logger.info("Server ready, simulation ticking every %ss", tick_interval)
        yield
        if loop_task is not None:
            loop_task.cancel()

    app = FastAPI(title="Crossroads Live", lifespan=lifespan)
    app.state.kernel = kernel
    app.state.gateway = gateway

    # Enable CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(UnknownDirectionError, unknown_direction_handler)
    app.add_exception_handler(InvalidParameterError, invalid_parameter_handler)
    app.include_router(router)
    return app

async def unknown_direction_handler(request: Request, exc: UnknownDirectionError):
    logger.info("Rejected unknown direction %r on %s", exc.direction, request.url.path)
    return JSONResponse(status_code=400, content=ErrorResult(message="Invalid direction").model_dump())

async def invalid_parameter_handler(request: Request, exc: InvalidParameterError):
    logger.info("Rejected %s on %s: %s", exc.name, request.url.path, exc)
    return JSONResponse(status_code=400, content=ErrorResult(message=str(exc)).model_dump())

BAD_REQUEST = {400: {"model": ErrorResult}}

def _kernel(request: Request) -> SimulationKernel:
    return request.app.state.kernel

@router.get("/")
def read_root():
    return {"status": "Crossroads Live backend running"}

@router.get("/api/traffic", response_model=Dict[str, DirectionStatus])
async def get_traffic(request: Request):
    """Returns the latest snapshot of every approach"""
    return _kernel(request).get_status()

@router.post("/api/traffic/reset", response_model=Dict[str, DirectionStatus])
async def reset_traffic(request: Request):
    """Sends every vehicle group back to the start of its approach"""
    return _kernel(request).execute(ResetSimulationCommand())

@router.post("/api/traffic/{direction}/maxSpeed", response_model=MaxSpeedResult, responses=BAD_REQUEST)
async def update_max_speed(direction: str, update: MaxSpeedUpdate, request: Request):
    """Caps the speed of both groups on one approach"""
    status = _kernel(request).execute(SetMaxSpeedCommand(direction, update.maxSpeed))
    return {"success": True, "data": status}

@router.get("/api/traffic/{direction}/prediction", response_model=SpeedPrediction, responses=BAD_REQUEST)
async def predict_speed(direction: str, request: Request,
                        maxSpeed: Optional[float] = Query(None, gt=0, le=config.MAX_SPEED_LIMIT, allow_inf_nan=False)):
    """One-off speed estimate for an approach at the current time of day"""
    kernel = _kernel(request)
    parsed = Direction.parse(direction)
    predicted = kernel.execute(PredictSpeedCommand(parsed.value, maxSpeed))
    if maxSpeed is None:
        maxSpeed = kernel.state.max_speeds[parsed.value]
    return {"direction": parsed, "maxSpeed": maxSpeed, "predictedSpeed": predicted}

@router.post("/api/density/{direction}", response_model=DensityResult, responses=BAD_REQUEST)
async def update_density(direction: str, update: DensityUpdate, request: Request):
    """Sets the vehicle density (veh/km) of one approach"""
    parsed = Direction.parse(direction)
    _kernel(request).execute(SetDensityCommand(parsed.value, update.density))
    # Echo what was asked for, the snapshot shows the clamped value
    return {"success": True, "direction": parsed, "density": update.density}

@router.post("/api/assistant", response_model=AssistantReply)
async def ask_assistant(request: Request, body: Optional[AssistantRequest] = None):
    """Rule-based summary of the current traffic, shaped by the prompt"""
    body = body or AssistantRequest()
    kernel = _kernel(request)
    if not kernel.initialized:
        kernel.initialize()
    logger.debug("Assistant prompt from %s: %r", body.userId, body.prompt)
    return build_reply(kernel.get_status(), body.prompt)

@router.websocket("/")
@router.websocket("/ws")
async def traffic_socket(websocket: WebSocket):
    gateway: ChatGateway = websocket.app.state.gateway
    await websocket.accept()
    await gateway.open(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None and message.get("bytes") is not None:
                raw = message["bytes"].decode("utf-8", errors="replace")
            await gateway.handle(websocket, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await gateway.close(websocket)

app = create_app()

def run():
    import uvicorn

    setup_logging()
    logger.info("Server running at http://%s:%d", config.HOST, config.PORT)
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_config=None)

if __name__ == "__main__":
    run()
