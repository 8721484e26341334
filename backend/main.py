from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from wip_planner.apis.routes.attendance_routes import router as attendance_router
from wip_planner.apis.routes.attendee_routes import router as attendee_router
from wip_planner.apis.routes.auth_routes import router as auth_router
from wip_planner.apis.routes.bill_routes import router as bill_router
from wip_planner.apis.routes.event_routes import router as event_router
from wip_planner.apis.routes.identity_routes import router as identity_router
from wip_planner.apis.routes.people_routes import router as people_router
from wip_planner.apis.routes.search_routes import router as search_router
from wip_planner.apis.routes.wip_window_routes import router as wip_window_router
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings


logger = get_logger(__name__)
settings = get_settings()

app = FastAPI(title="WIP Planner Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.BASE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Invalid request to {request.url.path}: {exc.errors()}")
    errors = [
        {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": "Invalid data", "errors": errors})


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


app.include_router(auth_router, prefix="/api")
app.include_router(identity_router, prefix="/api")
app.include_router(wip_window_router, prefix="/api")
app.include_router(event_router, prefix="/api")
app.include_router(attendee_router, prefix="/api")
app.include_router(attendance_router, prefix="/api")
app.include_router(bill_router, prefix="/api")
app.include_router(people_router, prefix="/api")
app.include_router(search_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting {settings.APP_NAME} server...")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
