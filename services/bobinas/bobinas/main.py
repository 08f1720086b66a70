"""
    Bobinas Service API

    This module implements a FastAPI-based microservice for managing the inventory of
    plastic film rolls ("bobinas") of a factory. It provides endpoints for creating,
    reading, updating and deleting bobinas, derived stock statistics, search and
    category filtering, and one photo per bobina.

    The service exposes:
    - Authentication endpoints (register, login, logout)
    - CRUD endpoints for bobinas, backed by the configured record store
    - Dashboard, analytics, filter-option and CSV export endpoints
    - Photo upload/removal endpoints backed by object storage
    - Health endpoint: Provides service health status for monitoring and orchestration
"""
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
import csv
import io
import logging
from fastapi import Body, Depends, FastAPI, File, Request, UploadFile, status
from fastapi.responses import JSONResponse, Response, StreamingResponse
from sqlalchemy.orm import Session

from . import auth, errors, models, schemas
from .analytics import summarize
from .clients.record_store_client import SupabaseRecordStore
from .clients.storage_client import SupabaseStorage
from .config import (
    LOG_LEVEL,
    RECORD_STORE,
    SUPABASE_BUCKET,
    SUPABASE_KEY,
    SUPABASE_TABLE,
    SUPABASE_URL,
)
from .database import engine, get_db
from .filters import filter_options
from .service import InventoryService
from .stores import RecordStore, SqlRecordStore

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "id", "code", "plastic_type", "color", "thickness", "width", "weight",
    "stock_quantity", "stock_status", "location", "entry_date", "expiry_date",
    "supplier", "notes", "photo_url", "created_at",
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create database tables
    models.Base.metadata.create_all(bind=engine)
    logger.info(f"bobinas-service started with the '{RECORD_STORE}' record store")
    yield


app = FastAPI(title="bobinas-service", lifespan=lifespan)


def get_record_store(db: Session = Depends(get_db)) -> RecordStore:
    """Dependency providing the configured record store."""
    if RECORD_STORE == "supabase":
        return SupabaseRecordStore(SUPABASE_URL, SUPABASE_KEY, table=SUPABASE_TABLE)
    return SqlRecordStore(db)


def get_inventory_service(store: RecordStore = Depends(get_record_store)) -> InventoryService:
    return InventoryService(store)


def get_storage() -> SupabaseStorage:
    return SupabaseStorage(SUPABASE_URL, SUPABASE_KEY, bucket=SUPABASE_BUCKET)


def get_criteria(
    search: str = "",
    plastic_type: Optional[str] = None,
    color: Optional[str] = None,
) -> schemas.FilterCriteria:
    return schemas.FilterCriteria(search_term=search, plastic_type=plastic_type, color=color)


@app.exception_handler(errors.ValidationError)
def validation_error_handler(request: Request, exc: errors.ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": {"message": str(exc), "errors": exc.errors}},
    )


@app.exception_handler(errors.ConflictError)
def conflict_error_handler(request: Request, exc: errors.ConflictError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": {"message": str(exc), "field": exc.field}},
    )


@app.exception_handler(errors.NotFoundError)
def not_found_error_handler(request: Request, exc: errors.NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(errors.TransportError)
def transport_error_handler(request: Request, exc: errors.TransportError):
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": str(exc)})


@app.exception_handler(errors.UploadError)
def upload_error_handler(request: Request, exc: errors.UploadError):
    status_code = status.HTTP_400_BAD_REQUEST if exc.rejected else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(errors.AuthError)
def auth_error_handler(request: Request, exc: errors.AuthError):
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.get("/healthz", response_model=dict)
def health():
    """
    Health check endpoint for the bobinas service.

    Returns:
        dict: A dictionary containing the health status of the service.
            - status (str): "healthy" if the service is operational.

    Example:
        GET /healthz
        Response: {"status": "healthy"}
    """
    return {"status": "healthy"}


@app.post("/auth/register", response_model=schemas.Token, status_code=status.HTTP_201_CREATED)
def register(user: schemas.UserRegister, db: Session = Depends(get_db)):
    """
    Register a new user account.

    Raises:
        409 if the email is already registered
    """
    return auth.sign_up(db, user.email, user.password, user.display_name)


@app.post("/auth/login", response_model=schemas.Token)
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    """
    Authenticate and login a user.

    Raises:
        401 if credentials are invalid
    """
    return auth.sign_in(db, credentials.email, credentials.password)


@app.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(current_user: auth.CurrentUser = Depends(auth.get_current_user)):
    """Revoke the bearer token used for this request."""
    auth.sign_out(current_user.token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/", response_model=List[schemas.Bobina])
def list_bobinas(
    criteria: schemas.FilterCriteria = Depends(get_criteria),
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    List bobinas, newest first, narrowed by the optional search term and category filters.

    Args:
        criteria: search, plastic_type and color query parameters ("all" means no filter)
    """
    return service.snapshot(criteria).bobinas


@app.get("/dashboard", response_model=schemas.InventorySnapshot)
def get_dashboard(
    criteria: schemas.FilterCriteria = Depends(get_criteria),
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Statistics, filter options and the filtered list, derived from one listing.
    """
    return service.snapshot(criteria)


@app.get("/analytics", response_model=schemas.InventorySummary)
def get_analytics(
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Get inventory statistics: total records, total stock, low stock and out of stock counts.
    """
    return summarize(service.list_bobinas())


@app.get("/filters", response_model=schemas.FilterOptions)
def get_filter_options(
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """Distinct plastic types and colors present in the collection."""
    return filter_options(service.list_bobinas())


@app.get("/export/csv")
def export_bobinas_csv(
    criteria: schemas.FilterCriteria = Depends(get_criteria),
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Export the (filtered) bobina list to CSV.

    Returns:
        CSV file with one row per bobina
    """
    bobinas = service.snapshot(criteria).bobinas

    output = io.StringIO()
    writer = csv.writer(output)

    # Write header
    writer.writerow(CSV_COLUMNS)

    # Write data
    for bobina in bobinas:
        row = bobina.model_dump(mode="json")
        writer.writerow(["" if row.get(column) is None else row[column] for column in CSV_COLUMNS])

    output.seek(0)
    return StreamingResponse(
        iter([output.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=bobinas.csv"}
    )


@app.get("/{bobina_id}", response_model=schemas.Bobina)
def get_bobina(
    bobina_id: str,
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Get a single bobina by ID.

    Raises:
        404 if bobina not found
    """
    return service.get_bobina(bobina_id)


@app.post("/", response_model=schemas.Bobina, status_code=status.HTTP_201_CREATED)
def create_bobina(
    candidate: Dict[str, Any] = Body(...),
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Create a new bobina owned by the current user.

    Numeric fields may be sent as numbers or numeric text.

    Raises:
        422 if a field is invalid
        409 if the code already exists
    """
    return service.create_bobina(candidate, owner_id=current_user.id)


@app.put("/{bobina_id}", response_model=schemas.Bobina)
def update_bobina(
    bobina_id: str,
    candidate: Dict[str, Any] = Body(...),
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Replace the editable fields of a bobina. id and owner are never changed.

    Raises:
        422 if a field is invalid
        404 if bobina not found
        409 if the new code already exists
    """
    return service.update_bobina(bobina_id, candidate)


@app.delete("/{bobina_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_bobina(
    bobina_id: str,
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Permanently delete a bobina.

    Raises:
        404 if bobina not found
    """
    service.delete_bobina(bobina_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post("/{bobina_id}/photo", response_model=schemas.Bobina)
def upload_bobina_photo(
    bobina_id: str,
    file: UploadFile = File(...),
    service: InventoryService = Depends(get_inventory_service),
    storage: SupabaseStorage = Depends(get_storage),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Upload a photo and attach it to a bobina.

    If the upload fails the bobina keeps its previous photo.

    Raises:
        400 if the file is not an acceptable image
        502 if object storage failed
        404 if bobina not found
    """
    data = file.file.read()
    return service.upload_photo(bobina_id, storage, data, file.filename or "photo.jpg", file.content_type)


@app.delete("/{bobina_id}/photo", response_model=schemas.Bobina)
def remove_bobina_photo(
    bobina_id: str,
    service: InventoryService = Depends(get_inventory_service),
    current_user: auth.CurrentUser = Depends(auth.get_current_user)
):
    """
    Remove the photo of a bobina. The stored object is left in place.

    Raises:
        404 if bobina not found
    """
    return service.set_photo(bobina_id, None)
