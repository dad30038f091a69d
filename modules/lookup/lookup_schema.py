from pydantic import BaseModel
from typing import Optional


class LookupResultModel(BaseModel):
    deliverable: bool
    etaMinDays: Optional[int] = None
    etaMaxDays: Optional[int] = None
    codAvailable: Optional[bool] = None
    shippingFee: Optional[int] = None
    message: str

    def as_response_data(self) -> dict:
        # negative answers carry only deliverable + message
        if not self.deliverable:
            return {"deliverable": False, "message": self.message}
        return self.model_dump()
