from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from eventbooking.config import settings
from eventbooking.database import init_db
from eventbooking.errors import DomainError, TransactionFailure
from eventbooking.logger import logger
from eventbooking.auth import router as auth_router
from eventbooking.events import router as events_router
from eventbooking.promotions import router as promotions_router
from eventbooking.loyalty import router as loyalty_router
from eventbooking.bookings import router as bookings_router, tickets_router
from eventbooking.organizer import router as organizer_router

@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    yield

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Event ticketing and booking API",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Turn domain errors into JSON responses with a user-facing message"""
    body = {"detail": exc.message, "code": exc.code.value}
    if isinstance(exc, TransactionFailure) and exc.event_id is not None:
        body["event_id"] = exc.event_id
    return JSONResponse(status_code=exc.http_status, content=body)

# Include routers
app.include_router(
    auth_router.router,
    prefix=f"{settings.API_V1_STR}/auth",
    tags=["Authentication"]
)

app.include_router(
    events_router,
    prefix=f"{settings.API_V1_STR}/events",
    tags=["Events"]
)

app.include_router(
    promotions_router,
    prefix=f"{settings.API_V1_STR}/promotions",
    tags=["Promotions"]
)

app.include_router(
    bookings_router,
    prefix=f"{settings.API_V1_STR}/bookings",
    tags=["Booking & Ticketing"]
)

app.include_router(
    loyalty_router,
    prefix=f"{settings.API_V1_STR}/loyalty",
    tags=["Loyalty"]
)

app.include_router(
    organizer_router,
    prefix=f"{settings.API_V1_STR}/organizer",
    tags=["Organizer"]
)

app.include_router(tickets_router, tags=["Ticket Verification"])

@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": settings.PROJECT_NAME,
        "version": "1.0.0",
        "docs": "/docs"
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
