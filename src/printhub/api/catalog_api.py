"""
Catalog API - FastAPI router for pricing rule and binding management.
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, field_validator

from ..engine.models import BindingDefinition, ColorMode, DuplexMode, PricingRule
from ..services.record_store import RecordNotFound
from .auth import require_admin
from .state import AppState, get_state

router = APIRouter(prefix="/api/config", tags=["catalog"])


def http_error(e: ValueError) -> HTTPException:
    if isinstance(e, RecordNotFound):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


# Pydantic models for API
class PricingRuleCreate(BaseModel):
    """Request model for creating a pricing rule."""
    rule_id: Optional[str] = None
    color: str
    duplex: str
    from_page: int = 1
    to_page: int = 100
    student_price: Decimal = Decimal(0)
    institute_price: Decimal = Decimal(0)
    regular_price: Decimal = Decimal(0)

    @field_validator('color')
    @classmethod
    def _color(cls, v):
        return ColorMode.normalize(v).value

    @field_validator('duplex')
    @classmethod
    def _duplex(cls, v):
        return DuplexMode.normalize(v).value


class PricingRuleUpdate(BaseModel):
    """Request model for updating a pricing rule."""
    color: Optional[str] = None
    duplex: Optional[str] = None
    from_page: Optional[int] = None
    to_page: Optional[int] = None
    student_price: Optional[Decimal] = None
    institute_price: Optional[Decimal] = None
    regular_price: Optional[Decimal] = None

    @field_validator('color')
    @classmethod
    def _color(cls, v):
        return ColorMode.normalize(v).value if v is not None else v

    @field_validator('duplex')
    @classmethod
    def _duplex(cls, v):
        return DuplexMode.normalize(v).value if v is not None else v


class PricingRuleResponse(BaseModel):
    """Response model for a pricing rule."""
    rule_id: Optional[str]
    color: str
    duplex: str
    from_page: int
    to_page: int
    student_price: float
    institute_price: float
    regular_price: float
    warnings: list[str] = []

    @classmethod
    def of(cls, rule: PricingRule, warnings: Optional[list[str]] = None) -> 'PricingRuleResponse':
        return cls(**rule.to_record(), warnings=warnings or [])


class PriceRangeModel(BaseModel):
    from_page: int = 1
    to_page: int = 100
    student_price: Decimal = Decimal(0)
    institute_price: Decimal = Decimal(0)
    regular_price: Decimal = Decimal(0)


class PriceRangeResponse(BaseModel):
    from_page: int
    to_page: int
    student_price: float
    institute_price: float
    regular_price: float


class BindingCreate(BaseModel):
    """Request model for creating a binding type."""
    name: str
    is_active: bool = True
    prices: list[PriceRangeModel] = []


class BindingUpdate(BaseModel):
    """Request model for updating a binding type."""
    name: Optional[str] = None
    is_active: Optional[bool] = None
    prices: Optional[list[PriceRangeModel]] = None


class BindingResponse(BaseModel):
    """Response model for a binding type."""
    id: Optional[str]
    name: str
    is_active: bool
    prices: list[PriceRangeResponse]
    warnings: list[str] = []

    @classmethod
    def of(cls, binding: BindingDefinition, warnings: Optional[list[str]] = None) -> 'BindingResponse':
        record = binding.to_record()
        return cls(id=binding.binding_id, warnings=warnings or [], **record)


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def _binding_from(data: BindingCreate) -> BindingDefinition:
    return BindingDefinition(
        name=data.name,
        is_active=data.is_active,
        prices=tuple(p.model_dump() for p in data.prices),
    )


# Pricing rule endpoints

@router.get("/pricing", response_model=list[PricingRuleResponse])
async def list_pricing_rules(stored_only: bool = False, state: AppState = Depends(get_state)):
    """List the pricing rules quotes are computed with."""
    rules = state.catalog.list_pricing_rules() if stored_only else state.catalog.pricing_rules()
    return [PricingRuleResponse.of(rule) for rule in rules]


@router.get("/pricing/{rule_id}", response_model=PricingRuleResponse)
async def get_pricing_rule(rule_id: str, state: AppState = Depends(get_state)):
    rule = state.catalog.get_pricing_rule(rule_id)
    if not rule:
        raise HTTPException(status_code=404, detail=f"Pricing rule '{rule_id}' not found")
    return PricingRuleResponse.of(rule)


@router.post("/pricing", response_model=PricingRuleResponse, status_code=201)
async def create_pricing_rule(rule_data: PricingRuleCreate, state: AppState = Depends(get_state),
                              _admin: dict = Depends(require_admin)):
    """Create a new pricing rule."""
    rule = PricingRule(**rule_data.model_dump())

    # Validate first
    validation = state.catalog.validate_pricing_rule(rule)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        created = state.catalog.create_pricing_rule(rule)
    except ValueError as e:
        raise http_error(e)
    return PricingRuleResponse.of(created, validation.warnings)


@router.put("/pricing/{rule_id}", response_model=PricingRuleResponse)
async def update_pricing_rule(rule_id: str, updates: PricingRuleUpdate, state: AppState = Depends(get_state),
                              _admin: dict = Depends(require_admin)):
    """Update an existing pricing rule."""
    # Only fields present in the request body are changed
    update_dict = updates.model_dump(exclude_unset=True)

    try:
        updated = state.catalog.update_pricing_rule(rule_id, update_dict)
    except ValueError as e:
        raise http_error(e)
    return PricingRuleResponse.of(updated, state.catalog.validate_pricing_rule(updated).warnings)


@router.delete("/pricing/{rule_id}")
async def delete_pricing_rule(rule_id: str, state: AppState = Depends(get_state),
                              _admin: dict = Depends(require_admin)):
    try:
        state.catalog.delete_pricing_rule(rule_id)
    except ValueError as e:
        raise http_error(e)
    return {"success": True, "message": f"Pricing rule '{rule_id}' deleted"}


@router.post("/pricing/validate", response_model=ValidationResponse)
async def validate_pricing_rule(rule_data: PricingRuleCreate, state: AppState = Depends(get_state),
                                _admin: dict = Depends(require_admin)):
    """Validate a pricing rule without saving."""
    result = state.catalog.validate_pricing_rule(PricingRule(**rule_data.model_dump()))
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)


# Binding endpoints

@router.get("/bindings", response_model=list[BindingResponse])
async def list_bindings(include_inactive: bool = True, state: AppState = Depends(get_state)):
    return [BindingResponse.of(b) for b in state.catalog.list_bindings(include_inactive=include_inactive)]


@router.get("/bindings/{binding_id}", response_model=BindingResponse)
async def get_binding(binding_id: str, state: AppState = Depends(get_state)):
    binding = state.catalog.get_binding(binding_id)
    if not binding:
        raise HTTPException(status_code=404, detail=f"Binding '{binding_id}' not found")
    return BindingResponse.of(binding)


@router.post("/bindings", response_model=BindingResponse, status_code=201)
async def create_binding(data: BindingCreate, state: AppState = Depends(get_state),
                         _admin: dict = Depends(require_admin)):
    binding = _binding_from(data)
    validation = state.catalog.validate_binding(binding)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        created = state.catalog.create_binding(binding)
    except ValueError as e:
        raise http_error(e)
    return BindingResponse.of(created, validation.warnings)


@router.put("/bindings/{binding_id}", response_model=BindingResponse)
async def update_binding(binding_id: str, updates: BindingUpdate, state: AppState = Depends(get_state),
                         _admin: dict = Depends(require_admin)):
    update_dict = updates.model_dump(exclude_unset=True)

    try:
        updated = state.catalog.update_binding(binding_id, update_dict)
    except ValueError as e:
        raise http_error(e)
    return BindingResponse.of(updated, state.catalog.validate_binding(updated).warnings)


@router.post("/bindings/{binding_id}/toggle", response_model=BindingResponse)
async def toggle_binding(binding_id: str, state: AppState = Depends(get_state),
                         _admin: dict = Depends(require_admin)):
    try:
        return BindingResponse.of(state.catalog.toggle_binding(binding_id))
    except ValueError as e:
        raise http_error(e)


@router.delete("/bindings/{binding_id}")
async def delete_binding(binding_id: str, state: AppState = Depends(get_state),
                         _admin: dict = Depends(require_admin)):
    try:
        state.catalog.delete_binding(binding_id)
    except ValueError as e:
        raise http_error(e)
    return {"success": True, "message": f"Binding '{binding_id}' deleted"}


@router.get("/stats")
async def get_stats(state: AppState = Depends(get_state), _admin: dict = Depends(require_admin)):
    """Get catalog statistics."""
    return state.catalog.get_stats()
