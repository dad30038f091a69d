from pydantic import BaseModel
from typing import Optional, Any


# Generic response model for all responses
# status_code only drives the HTTP status, data is flattened into the body
class GenericResponseModel(BaseModel):
    status_code: int
    ok: bool = False
    error: Optional[str] = None
    data: Any = {}
