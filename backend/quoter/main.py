import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quoter.api import dashboard, pricing, quotes, saved, validate
from quoter.config import CORS_ORIGINS, LOG_JSON, LOG_LEVEL
from quoter.db.session import init_db
from quoter.logging_config import setup_logging
from quoter.services.errors import QuoteError

logger = logging.getLogger(__name__)

app = FastAPI(title="Print Shop Quoter")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
app.include_router(pricing.router, prefix="/quotes", tags=["pricing"])
app.include_router(pricing.tools, prefix="/pricing", tags=["pricing"])
app.include_router(saved.router, prefix="/saved", tags=["saved"])
app.include_router(validate.router, prefix="/validate", tags=["validate"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])


@app.exception_handler(QuoteError)
async def quote_error_handler(request: Request, exc: QuoteError):
    logger.warning("Domain error on %s: %s", request.url.path, exc)
    return JSONResponse({"detail": str(exc)}, status_code=422)


@app.on_event("startup")
def on_startup():
    setup_logging(LOG_LEVEL, LOG_JSON)
    init_db()
    logger.info("Quoter started")


@app.get("/")
async def root():
    return {"status": "ok", "service": "print-shop-quoter"}
