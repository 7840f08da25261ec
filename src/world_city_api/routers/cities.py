# src/world_city_api/routers/cities.py
import logging
from typing import List
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud, schemas # Use .. for relative imports
from ..database import get_db # Use .. for relative imports
from ..exceptions import CityNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/city",  # All routes in this router will start with /city
    tags=["City"],   # Tag for API documentation
    responses={404: {"model": schemas.ErrorResponse, "description": "City not found"}},
)

@router.get(
    "/{name}",
    response_model=List[schemas.CityDisplay],
    summary="Request City information"
)
async def read_city(
    name: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Retrieve every city whose name matches `name` exactly (case-sensitive).

    Each entry carries **Name**, **CountryCode**, **District** and **Population**.
    """
    cities = await crud.get_cities_by_name(db, name=name)
    if not cities:
        raise CityNotFoundError(name)
    return cities

@router.post("/", response_model=schemas.CityRecord, include_in_schema=False)
@router.post(
    "",
    response_model=schemas.CityRecord,
    summary="Create new City"
)
async def create_city(
    city: schemas.CityCreate, # Request body will be validated against CityCreate schema
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new city. Its ID is the current highest ID plus one.

    - **name**: Name of the city.
    - **countrycode**: Country code of the city.
    - **district**: District of the city.
    - **population**: Population of the city (non-negative integer).
    """
    return await crud.create_city(db=db, city=city)

@router.put(
    "/{name}",
    response_model=List[schemas.CityRecord],
    summary="Update City information"
)
async def update_city(
    name: str,
    update: schemas.CityPopulationUpdate,
    db: AsyncSession = Depends(get_db)
):
    """
    Set the population of every city named `name` and return the updated rows.
    """
    logger.debug(f"Updating population of {name!r} to {update.population}")
    cities = await crud.update_city_population(db, name=name, population=update.population)
    if not cities:
        raise CityNotFoundError(name)
    return cities

@router.delete(
    "/{name}",
    response_model=schemas.DeleteResult,
    responses={404: {"model": schemas.DeleteResult, "description": "No city deleted"}},
    summary="Delete City"
)
async def delete_city(
    name: str,
    db: AsyncSession = Depends(get_db)
):
    """
    Delete every city named `name`.
    `successful` is true when at least one row was removed.
    """
    deleted = await crud.delete_cities_by_name(db, name=name)
    successful = deleted > 0
    if not successful:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"successful": successful},
        )
    return {"successful": successful}
