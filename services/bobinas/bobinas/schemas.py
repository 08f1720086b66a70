"""
Pydantic schemas for request/response validation in the Bobinas service.

These schemas define the structure of data for API requests and responses,
and the record type passed between the record stores and the inventory core.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, computed_field

from .stock import STATUS_LABELS, StockStatus, classify_stock

# Known categories offered by the bobina form; records may hold other values.
PLASTIC_TYPES = ["PE", "PP", "PVC", "PET", "PS", "OUTRO"]
COLORS = ["Transparente", "Branco", "Preto", "Azul", "Verde", "Vermelho", "Amarelo", "Outro"]


class BobinaData(BaseModel):
    """Validated, user-editable bobina fields (output of validators.validate_bobina)."""
    code: str
    plastic_type: str
    color: str
    thickness: Decimal = Field(..., ge=0, description="Thickness in millimeters")
    width: Decimal = Field(..., ge=0, description="Width in millimeters")
    weight: Decimal = Field(..., ge=0, description="Weight in kilograms")
    stock_quantity: int = Field(..., ge=0)
    location: Optional[str] = None
    entry_date: date
    expiry_date: Optional[date] = None
    supplier: Optional[str] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None


class Bobina(BobinaData):
    """
    Schema for a persisted bobina, includes store-assigned fields.

    Attributes:
        id (str): Bobina's unique identifier
        owner_id (str): Id of the user who created the record
        created_at (datetime): When the record was created
        updated_at (datetime): When the record was last updated
        stock_status (StockStatus): Derived from stock_quantity on every read
    """
    id: str
    owner_id: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def stock_status(self) -> StockStatus:
        return classify_stock(self.stock_quantity)

    @computed_field
    @property
    def stock_label(self) -> str:
        return STATUS_LABELS[self.stock_status]

    class Config:
        from_attributes = True


class FilterCriteria(BaseModel):
    """Search term and category filters used to derive a display subset."""
    search_term: str = ""
    plastic_type: Optional[str] = None
    color: Optional[str] = None


class FilterOptions(BaseModel):
    """Distinct category values present in a collection."""
    plastic_types: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)


class InventorySummary(BaseModel):
    """Aggregate statistics over the whole collection."""
    total_records: int = 0
    total_stock: int = 0
    low_stock_count: int = 0
    out_of_stock_count: int = 0


class InventorySnapshot(BaseModel):
    """Dashboard read model derived from one fresh listing."""
    summary: InventorySummary
    bobinas: List[Bobina]
    options: FilterOptions
    criteria: FilterCriteria


class UserRegister(BaseModel):
    """Schema for user registration with password."""
    email: EmailStr
    password: str = Field(..., min_length=6, description="Password must be at least 6 characters")
    display_name: str = Field(..., min_length=1)


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"
