from typing import Dict, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from schema.base import GenericResponseModel

from context_manager.context import context_shop_data

from logger import logger


# build a proper api response from the Generic response sent to it
def build_api_response(
    generic_response: GenericResponseModel,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    try:
        response_json = jsonable_encoder(generic_response)

        # Remove the status_code key if it exists
        response_json.pop("status_code", None)

        if response_json.get("error") is None:
            response_json.pop("error", None)

        # payload fields sit next to "ok" in the body
        data = response_json.pop("data", None)
        if isinstance(data, dict):
            response_json.update(data)
        elif data is not None:
            response_json["data"] = data

        res = JSONResponse(
            status_code=generic_response.status_code,
            content=response_json,
            headers=headers,
        )

        logger.info(
            extra=context_shop_data.get(),
            msg="build_api_response: Generated Response with status_code:"
            + f"{generic_response.status_code}",
        )
        return res

    except Exception as e:
        logger.error(
            extra=context_shop_data.get(),
            msg=f"Exception in build_api_response error : {e}",
        )

        return JSONResponse(
            status_code=generic_response.status_code,
            content={"ok": False, "error": str(e)},
            headers=headers,
        )
