from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
from pathlib import Path
from typing import Optional

from blob_client import BlobClient
from catalog import AlbumCatalog
from errors import BadRequestError, ConfigurationError, UpstreamError
from forms import validate_contact, validate_subscription
from mailer import ResendClient, TurnstileVerifier
from metadata import MetadataStore
from models import AlbumListResponse, ContactSubmission, SubscribeRequest


logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(title="LLP Events Photos")

# Initialize components
blob_client = BlobClient()
metadata_store = MetadataStore()
album_catalog = AlbumCatalog(blob_client, metadata_store)
mailer = ResendClient()
turnstile = TurnstileVerifier()

# Edge caches may serve a listing for 5 minutes, and stale while revalidating
PHOTOS_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"

# path -> (allowed methods, allowed request headers)
CORS_RULES: dict[str, tuple[str, Optional[str]]] = {
    "/api/photos": ("GET, OPTIONS", None),
    "/api/contact": ("POST, OPTIONS", "Content-Type"),
}


@app.on_event("shutdown")
async def shutdown_event():
    """Close upstream HTTP clients"""
    await blob_client.close()
    await mailer.close()
    await turnstile.close()


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    rule = CORS_RULES.get(request.url.path)
    if rule:
        methods, headers = rule
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = methods
        if headers:
            response.headers["Access-Control-Allow-Headers"] = headers
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        message = "Method not allowed"
    return JSONResponse(
        {"error": message}, status_code=exc.status_code, headers=exc.headers
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid request body"}, status_code=status.HTTP_400_BAD_REQUEST
    )


@app.exception_handler(BadRequestError)
async def bad_request_handler(request: Request, exc: BadRequestError):
    return JSONResponse({"error": str(exc)}, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(
        {
            "error": ConfigurationError.public_message,
            "message": ConfigurationError.public_detail,
        },
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.error("Upstream failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        {"error": exc.public_message, "details": exc.payload},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.get("/api/healthz")
async def health_check():
    """Simple health check endpoint"""
    return {"status": "ok"}


@app.options("/api/photos")
async def api_photos_preflight():
    return Response(status_code=status.HTTP_200_OK)


@app.get("/api/photos")
async def api_photos(show: Optional[str] = None, cursor: Optional[str] = None):
    """List albums, or one page of photos when `show` names an album"""
    try:
        if show:
            page = await album_catalog.list_photos(show, cursor=cursor)
            payload = page.model_dump(mode="json", by_alias=True)
        else:
            albums = await album_catalog.list_albums()
            payload = AlbumListResponse(albums=albums).model_dump(
                mode="json", by_alias=True
            )
    except ConfigurationError:
        raise
    except Exception as e:
        logger.exception("Error fetching photos")
        body = {"error": "Failed to fetch photos", "message": str(e)}
        if isinstance(e, UpstreamError) and e.payload is not None:
            body["details"] = e.payload
        return JSONResponse(body, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = JSONResponse(payload)
    response.headers["Cache-Control"] = PHOTOS_CACHE_CONTROL
    return response


@app.options("/api/contact")
async def api_contact_preflight():
    return Response(status_code=status.HTTP_200_OK)


@app.post("/api/contact")
async def api_contact(submission: ContactSubmission):
    """Verify the Turnstile token and forward the message by email"""
    validate_contact(submission)

    if not (turnstile.configured and mailer.configured):
        raise ConfigurationError(
            "Contact form needs TURNSTILE_SECRET_KEY and RESEND_API_KEY"
        )

    if not await turnstile.verify(submission.turnstile_token):
        raise BadRequestError("Verification failed. Please try again.")

    await mailer.send_contact(submission.name, submission.email, submission.message)
    return {"success": True, "message": "Message sent successfully!"}


@app.post("/api/subscribe")
async def api_subscribe(subscription: SubscribeRequest):
    """Send the newsletter welcome email"""
    email = validate_subscription(subscription)
    await mailer.send_welcome(email)
    return {"success": True, "message": "Successfully subscribed!"}


def mount_site() -> None:
    site_path = Path(__file__).resolve().parent / "public"
    if site_path.exists():
        app.mount("/", StaticFiles(directory=site_path, html=True), name="site")


mount_site()
