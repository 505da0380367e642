"""
Query-string parsing into request DTOs.
"""

from typing import Any, Type, TypeVar

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError

from claimflow.application.dto.base_dto import RequestDTO

DTO = TypeVar("DTO", bound=RequestDTO)


def parse_query(dto_cls: Type[DTO], **values: Any) -> DTO:
    """
    Build a request DTO from query parameters, dropping the ones not supplied.
    Validation failures surface as a regular 400 validation response.
    """
    try:
        return dto_cls(**{key: value for key, value in values.items() if value is not None})
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors(include_url=False, include_context=False)) from e
