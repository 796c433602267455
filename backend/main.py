# backend/main.py
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import init_db

# Routers
from routes.cart import router as cart_router
from routes.checkout import router as checkout_router
from routes.inquiries import router as inquiries_router
from routes.orders import router as orders_router
from routes.store_settings import router as store_settings_router

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

# Create tables on startup (Alembic handles migrations in production)
init_db()

app = FastAPI(title="Bookshop Orders API", version="1.0.0")

# The storefront sends the cart cookie, so origins must be explicit
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(orders_router)
app.include_router(inquiries_router)
app.include_router(store_settings_router)

@app.get("/")
def read_root():
    return {"message": "Bookshop Orders API is running"}
