from typing import Optional

from fastapi import APIRouter, Depends, Query

from reworkit.api.dependencies.store import get_result_store
from reworkit.common.config.constants import GET_PACKAGE_PATH
from reworkit.common.dto.build import Package
from reworkit.common.exceptions.base_exceptions import ValidationException
from reworkit.storage.result_store import ResultStore


router = APIRouter()


@router.get(GET_PACKAGE_PATH, response_model=Package)
async def get_package_result(
    name: Optional[str] = Query(None, description="Package name"),
    store: ResultStore = Depends(get_result_store),
) -> Package:
    if not name:
        raise ValidationException.missing_field("name")

    package = await store.get(name)
    return package.sorted()
