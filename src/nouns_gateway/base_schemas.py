from datetime import datetime
from typing import Any, cast

from bson import Decimal128, ObjectId
from fastapi.responses import JSONResponse
import orjson
from pydantic import BaseModel, ConfigDict
from typing_extensions import Self


def _bson_default(value: object) -> object:
    """Convert BSON values orjson cannot serialize natively."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, Decimal128):
        return str(value.to_decimal())
    if isinstance(value, bytes):
        return "0x" + value.hex()
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


def dumps(data: object) -> bytes:
    return orjson.dumps(data, default=_bson_default, option=orjson.OPT_NON_STR_KEYS)


def _orjson_dumps(data: object) -> str:
    return dumps(data).decode("utf-8")


class BaseJSONModel(BaseModel):
    """
    Base Pydantic model.
    """

    model_config = ConfigDict()

    @classmethod
    def model_validate_json(
        cls,
        json_data: str | bytes | bytearray,
        **kwargs: object,
    ) -> Self:
        if isinstance(json_data, str):
            json_data = json_data.encode("utf-8")
        obj = orjson.loads(json_data)
        return cls.model_validate(obj, **cast("dict[str, Any]", kwargs))

    def model_dump_json(self, **kwargs: object) -> str:
        dump_kwargs = kwargs.copy()
        if "indent" in dump_kwargs:
            del dump_kwargs["indent"]

        data = self.model_dump(**cast("dict[str, Any]", dump_kwargs))
        return _orjson_dumps(data)


class DocumentJSONResponse(JSONResponse):
    """
    JSON response for raw store documents.

    `None` renders as `null` so a missing single document is not an error.
    """

    def render(self, content: object) -> bytes:
        return dumps(content)
