from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.routers import coupons, orders, users

OPENAPI_TAGS = [
    {"name": "Users", "description": "Create and look up shop customers."},
    {"name": "Orders", "description": "Place orders, confirm payment and delivery."},
    {"name": "Coupons", "description": "Validate, apply and manage reward coupons."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Reward coupon engine for the shop backend. "
        "Paid orders earn tiered percentage coupons that customers redeem "
        "once on a later order."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


app.include_router(users.router, prefix="/v1/users", tags=["Users"])
app.include_router(orders.router, prefix="/v1/orders", tags=["Orders"])
app.include_router(coupons.router, prefix="/v1/coupons", tags=["Coupons"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
