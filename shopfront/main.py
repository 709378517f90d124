# shopfront/main.py
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import services
from .config import Settings, get_settings
from .database import DocumentStore, open_store
from .errors import ShopError, ValidationError
from .logs import setup_logging
from .models import LoginIn, parse_body

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


# ---------------------------
# Login
# ---------------------------
@router.post("/login")
async def login(payload: Any = Body(None), store: DocumentStore = Depends(get_store)):
    creds = parse_body(LoginIn, payload)
    role = await services.login(store, creds.username, creds.password)
    return {"role": role}


# ---------------------------
# Product endpoints
# ---------------------------
@router.get("/product")
async def list_products(store: DocumentStore = Depends(get_store)):
    return await services.list_products(store)


@router.get("/products/{product_id}")
async def get_product(product_id: str, store: DocumentStore = Depends(get_store)):
    return await services.get_product(store, product_id)


@router.post("/products")
async def create_product(payload: Any = Body(None), store: DocumentStore = Depends(get_store)):
    product = await services.create_product(store, payload)
    return {"message": "Product created", "product": product}


@router.put("/products/{product_id}")
async def update_product(product_id: str, payload: Any = Body(None), store: DocumentStore = Depends(get_store)):
    product = await services.update_product(store, product_id, payload)
    return {"message": "Product updated", "product": product}


@router.delete("/products/{product_id}")
async def delete_product(product_id: str, store: DocumentStore = Depends(get_store)):
    await services.delete_product(store, product_id)
    return {"message": "Product deleted"}


# ---------------------------
# Cart endpoints
# ---------------------------
@router.post("/cart")
async def cart_add(payload: Any = Body(None), store: DocumentStore = Depends(get_store)):
    try:
        await services.add_to_cart(store, payload)
    except ValidationError as exc:
        # cart routes answer with a single {error}, not the field list
        return JSONResponse(status_code=400, content={"error": exc.message})
    return {"message": "Added to cart"}


@router.post("/cart/purchase")
async def cart_purchase(payload: Any = Body(None), store: DocumentStore = Depends(get_store)):
    try:
        await services.purchase(store, payload)
    except ValidationError as exc:
        return JSONResponse(status_code=400, content={"error": exc.message})
    return "Purchase successful!"


@router.get("/cart/{user_id}")
async def view_cart(user_id: str, store: DocumentStore = Depends(get_store)):
    return await services.view_cart(store, user_id)


# ---------------------------
# Health
# ---------------------------
@router.get("/health")
async def health(store: DocumentStore = Depends(get_store)):
    try:
        await store.ping()
    except Exception as e:
        logger.warning("Store ping failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "degraded", "store": str(e)[:100]})
    return {"status": "ok", "store": "connected"}


# ---------------------------
# Error handlers
# ---------------------------
async def shop_error_handler(request: Request, exc: ShopError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        errors.append({
            "type": "field",
            "msg": err.get("msg", "Invalid value"),
            "path": ".".join(str(p) for p in err.get("loc", ())[1:]),
            "location": "body",
        })
    return JSONResponse(status_code=400, content={"errors": errors})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------------------------
# App factory
# ---------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if app.state.store is None:
        app.state.store = open_store(settings)
    store = app.state.store
    await store.open()
    try:
        if settings.seed_users:
            await services.seed_users(store)
        logger.info("shopfront ready (%s store)", type(store).__name__)
        yield
    finally:
        await store.close()


def create_app(settings: Optional[Settings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="shopfront", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


app = create_app()


def run():
    import uvicorn
    settings = get_settings()
    uvicorn.run("shopfront.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
