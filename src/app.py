"""Storefront FastAPI application.

Serves the ordering domain (cart and checkout) and processes commands
synchronously via HTTP. Each request is wrapped in the ordering domain
context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from ordering/domain.toml.
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.domain import ordering  # noqa: E402

ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="E-commerce storefront: cart and checkout",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_DOMAIN_PREFIXES = ("/cart", "/orders")


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the ordering domain context for cart and order requests."""
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with ordering.domain_context():
            response = await call_next(request)
        return response
    # No domain match: pass through (health check, docs, etc.)
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    """Answer malformed bodies with the same failure shape as domain errors."""
    messages = [f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()]
    return JSONResponse(status_code=400, content={"success": False, "message": "; ".join(messages)})


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from ordering.api.routes import cart_router, order_router  # noqa: E402

app.include_router(cart_router)
app.include_router(order_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "ordering": {"name": ordering.name},
            },
        }
    )
