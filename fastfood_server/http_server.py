"""HTTP server for the fast food storefront."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .exceptions import (
    ActionInProgress,
    FastFoodError,
    NotAuthenticated,
    RateLimited,
    RemoteFailure,
    ValidationRejected,
)
from .server import create_storefront
from .storefront import Storefront

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("fastfood-http-server")

# Global state
storefront: Optional[Storefront] = None

STATUS_CODES = {
    ValidationRejected: 400,
    NotAuthenticated: 401,
    ActionInProgress: 409,
    RateLimited: 429,
    RemoteFailure: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global storefront

    # Startup
    logger.info("Starting Fast Food HTTP Server...")
    if storefront is None:
        storefront = create_storefront()
    state = await storefront.start()
    logger.info(f"Session restored: {state.status}")

    yield

    # Shutdown
    logger.info("Shutting down Fast Food HTTP Server...")
    await storefront.client.appwrite.aclose()


app = FastAPI(
    title="Fast Food MCP Server",
    description="HTTP API for the fast food storefront: auth, menu, cart and orders",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(FastFoodError)
async def fastfood_error_handler(request: Request, exc: FastFoodError) -> JSONResponse:
    status_code = STATUS_CODES.get(type(exc), 500)
    content = {"detail": exc.message}
    if isinstance(exc, ValidationRejected):
        content["errors"] = exc.errors
    if isinstance(exc, RateLimited):
        content["retry_after"] = int(exc.remaining_seconds)
    return JSONResponse(status_code=status_code, content=content)


# Request Models
class SignInRequest(BaseModel):
    email: str
    password: str


class SignUpRequest(BaseModel):
    name: str
    email: str
    password: str


class SearchRequest(BaseModel):
    query: str = ""
    category: Optional[str] = None


class AddToCartRequest(BaseModel):
    menu_id: str
    customization_ids: list[str] = Field(default_factory=list)
    quantity: int = 1


class CartItemRequest(BaseModel):
    menu_id: str


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Fast Food MCP Server",
        "version": "0.1.0",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "auth": {
                "sign_in": "POST /auth/sign-in",
                "sign_up": "POST /auth/sign-up",
                "sign_out": "POST /auth/sign-out",
                "status": "GET /auth/status",
            },
            "profile": "GET /profile",
            "menu": {
                "categories": "GET /categories",
                "search": "POST /menu/search",
                "item": "GET /menu/{menu_id}",
            },
            "cart": {
                "get": "GET /cart",
                "add": "POST /cart/add",
                "remove": "POST /cart/remove",
                "increase": "POST /cart/increase",
                "decrease": "POST /cart/decrease",
                "clear": "POST /cart/clear",
            },
            "orders": {"place": "POST /orders"},
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "authenticated": storefront.auth.is_authenticated if storefront else False,
    }


# Authentication endpoints
@app.post("/auth/sign-in")
async def sign_in(request: SignInRequest):
    state = await storefront.sign_in(request.email, request.password)
    return {"success": state.is_authenticated, "status": state.status}


@app.post("/auth/sign-up")
async def sign_up(request: SignUpRequest):
    state = await storefront.sign_up(request.name, request.email, request.password)
    return {"success": state.is_authenticated, "status": state.status}


@app.post("/auth/sign-out")
async def sign_out():
    await storefront.logout()
    return {"success": True, "message": "Successfully signed out"}


@app.get("/auth/status")
async def auth_status():
    state = storefront.auth.get_state()
    return {"authenticated": state.is_authenticated, "status": state.status}


@app.get("/profile")
async def profile():
    user = storefront.auth.user
    if not storefront.auth.is_authenticated or user is None:
        raise NotAuthenticated()
    return {"name": user.name, "email": user.email, "avatar": user.avatar}


# Menu endpoints
@app.get("/categories")
async def categories():
    result = await storefront.get_categories()
    return {"count": len(result), "categories": [c.model_dump() for c in result]}


@app.post("/menu/search")
async def search_menu(request: SearchRequest):
    items = await storefront.search_menu(request.query, request.category)
    return {"count": len(items), "items": [item.model_dump(mode="json") for item in items]}


@app.get("/menu/{menu_id}")
async def menu_item(menu_id: str):
    item, customizations = await storefront.get_menu_item(menu_id)
    return {
        "item": item.model_dump(mode="json"),
        "customizations": [c.model_dump(mode="json") for c in customizations],
    }


# Cart endpoints
def cart_response() -> dict:
    return {
        "cart": storefront.cart.get_state().model_dump(mode="json"),
        "summary": storefront.cart.checkout_summary().model_dump(mode="json"),
    }


@app.get("/cart")
async def get_cart():
    return cart_response()


@app.post("/cart/add")
async def add_to_cart(request: AddToCartRequest):
    await storefront.add_to_cart(request.menu_id, request.customization_ids, request.quantity)
    return cart_response()


@app.post("/cart/remove")
async def remove_from_cart(request: CartItemRequest):
    storefront.cart.remove_item(request.menu_id)
    return cart_response()


@app.post("/cart/increase")
async def increase_quantity(request: CartItemRequest):
    storefront.cart.increase_qty(request.menu_id)
    return cart_response()


@app.post("/cart/decrease")
async def decrease_quantity(request: CartItemRequest):
    storefront.cart.decrease_qty(request.menu_id)
    return cart_response()


@app.post("/cart/clear")
async def clear_cart():
    storefront.cart.clear_cart()
    return cart_response()


# Order endpoints
@app.post("/orders")
async def place_order():
    confirmation = storefront.place_order()
    return confirmation.model_dump(mode="json")


def run_http_server(host: str = "0.0.0.0", port: int = 8000, reload: bool = False):
    """Run the HTTP server."""
    import uvicorn

    if reload:
        uvicorn.run("fastfood_server.http_server:app", host=host, port=port, reload=True, log_level="info")
    else:
        uvicorn.run(app, host=host, port=port, log_level="info")
