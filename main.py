import logging
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware

from config import PORT, configure_logging
from database import db
from schemas import (
    AddProductRequest,
    CartAddRequest,
    CartAdjustRequest,
    CheckoutRequest,
    CommandResult,
    LoginRequest,
    RegisterRequest,
    StoreStatusRequest,
)
from session import StoreSession
from storefront import Storefront

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Storefront Khata & Rewards API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

STATUS_BY_CODE = {
    "validation": 400,
    "empty_cart": 400,
    "ineligible": 400,
    "role": 403,
    "duplicate_account": 409,
    "authentication": 401,
    "not_logged_in": 401,
    "not_found": 404,
}


# Utility

def storefront(user_id: Optional[str] = None) -> Storefront:
    return Storefront(StoreSession(db, user_id))


def respond(result: CommandResult):
    if not result.ok:
        raise HTTPException(status_code=STATUS_BY_CODE.get(result.code, 400), detail=result.message)
    return {"message": result.message, "data": jsonable_encoder(result.data)}


@app.get("/")
async def root():
    return {"message": "Storefront Backend Running"}


@app.get("/test")
async def test_database():
    info = {"backend": "running", "database": "unavailable"}
    try:
        info["store"] = db.describe()
        info["database"] = "connected"
    except Exception as e:
        info["database"] = f"error: {str(e)[:80]}"
    return info


# Auth
@app.post("/auth/register")
async def register(payload: RegisterRequest):
    return respond(storefront().create_user(payload.name, payload.email, payload.password, payload.role))


@app.post("/auth/login")
async def login(payload: LoginRequest):
    result = storefront().authenticate(payload.email, payload.password, payload.role)
    if result.ok:
        user = result.data
        return {"user_id": user.id, "role": user.role, "name": user.name}
    return respond(result)


@app.get("/users/{user_id}")
async def get_user(user_id: str):
    return respond(storefront(user_id).current_user())


# Products
@app.get("/categories")
async def list_categories():
    return respond(storefront().categories())


@app.get("/products")
async def list_products(category: str = "All", q: Optional[str] = None):
    return respond(storefront().products(category, q))


@app.post("/shop/{user_id}/products")
async def add_product(user_id: str, payload: AddProductRequest):
    return respond(storefront(user_id).add_product(
        payload.name, payload.price, payload.image_url, payload.category,
    ))


@app.get("/shop/{user_id}/products")
async def shop_products(user_id: str):
    return respond(storefront(user_id).my_products())


@app.post("/shop/{user_id}/status")
async def set_store_status(user_id: str, payload: StoreStatusRequest):
    return respond(storefront(user_id).set_store_status(payload.status))


@app.get("/shop/{user_id}/orders")
async def received_orders(user_id: str):
    return respond(storefront(user_id).orders_received())


# Cart
@app.post("/cart/{user_id}/add")
async def cart_add(user_id: str, item: CartAddRequest):
    return respond(storefront(user_id).add_to_cart(item.product_id))


@app.post("/cart/{user_id}/adjust")
async def cart_adjust(user_id: str, item: CartAdjustRequest):
    return respond(storefront(user_id).adjust_cart_quantity(item.product_id, item.delta))


@app.get("/cart/{user_id}")
async def get_cart(user_id: str, use_rewards: bool = False):
    return respond(storefront(user_id).cart_summary(use_rewards))


# Checkout -> create order
@app.post("/checkout/{user_id}")
async def checkout(user_id: str, req: CheckoutRequest):
    return respond(storefront(user_id).settle(req.type, req.use_rewards, req.payment_method))


@app.get("/orders/{user_id}")
async def order_history(user_id: str):
    return respond(storefront(user_id).order_history())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
