from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class PincodeRuleFormModel(BaseModel):
    """Raw single-rule form submission, every field as typed by the merchant"""

    model_config = ConfigDict(populate_by_name=True)

    pincode: Optional[str] = None
    deliverable: Optional[str] = None
    eta_min_days: Optional[str] = Field(default=None, alias="etaMinDays")
    eta_max_days: Optional[str] = Field(default=None, alias="etaMaxDays")
    cod_available: Optional[str] = Field(default=None, alias="codAvailable")
    shipping_fee: Optional[str] = Field(default=None, alias="shippingFee")

    def as_raw_fields(self) -> dict:
        return self.model_dump(by_alias=True)


class PincodeRuleRowModel(BaseModel):
    """One row of the admin rules table"""

    id: str
    shop: str
    pincode: str
    deliverable: bool
    etaMinDays: Optional[int] = None
    etaMaxDays: Optional[int] = None
    codAvailable: bool
    shippingFee: Optional[int] = None

    # display values, as the table renders them
    eta: str
    codText: str
    deliverText: str
    shipText: str

    @classmethod
    def from_rule(cls, rule) -> "PincodeRuleRowModel":
        eta_min, eta_max = rule.eta_min_days, rule.eta_max_days
        if eta_min or eta_max:
            eta = f"{'-' if eta_min is None else eta_min} - {'-' if eta_max is None else eta_max}"
        else:
            eta = "-"

        return cls(
            **rule.to_model(),
            eta=eta,
            codText="Yes" if rule.cod_available else "No",
            deliverText="Yes" if rule.deliverable else "No",
            shipText="-" if rule.shipping_fee is None else str(rule.shipping_fee),
        )


class InvalidRowModel(BaseModel):
    row: int
    reason: str
    pincode: Optional[str] = None


class BulkUploadResponseModel(BaseModel):
    inserted: int
    updated: int
    invalidCount: int
    invalid: List[InvalidRowModel]


class PaginationInfo(BaseModel):
    """Pagination metadata"""

    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool
