# backend/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import init_db

# Routers
from routes.auth import router as auth_router
from routes.shop import router as shop_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router
from routes.admin import router as admin_router
from routes.products import router as products_router
from routes.logs import router as logs_router
from utils.auth_events import AuthEventBus, log_auth_event

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("harvesthub")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()

    # Session change notifications, torn down with the app
    bus = AuthEventBus()
    unsubscribe = bus.subscribe(log_auth_event)
    app.state.auth_events = bus
    logger.info("HarvestHub API started")
    try:
        yield
    finally:
        unsubscribe()
        bus.clear()
        app.state.auth_events = None
        logger.info("HarvestHub API stopped")


app = FastAPI(title="HarvestHub API", version="1.0.0", lifespan=lifespan)

# CORS Configuration
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[settings.CART_SESSION_HEADER],
)

# Router registration
app.include_router(auth_router)
app.include_router(shop_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(admin_router)
app.include_router(products_router)
app.include_router(logs_router)

@app.get("/")
def read_root():
    return {"message": "HarvestHub API is running"}
