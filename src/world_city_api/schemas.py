from pydantic import BaseModel
from typing import Any, Optional
from pydantic import Field

from .constants import NAME_MAX_LENGTH, COUNTRY_CODE_MAX_LENGTH, DISTRICT_MAX_LENGTH

# Population is stored in a 32-bit signed INTEGER column.
POPULATION_MAX = 2_147_483_647

# --- Request Schemas ---

class CityCreate(BaseModel):
    """Body of POST /city. Keys are lowercase, matching the table columns."""
    name: str = Field(..., max_length=NAME_MAX_LENGTH)
    countrycode: str = Field(..., max_length=COUNTRY_CODE_MAX_LENGTH)
    district: str = Field(..., max_length=DISTRICT_MAX_LENGTH)
    # Numeric strings such as "100" are coerced to int
    population: int = Field(..., ge=0, le=POPULATION_MAX)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Testville",
                "countrycode": "TST",
                "district": "Test",
                "population": 100
            }
        }

class CityPopulationUpdate(BaseModel):
    """Body of PUT /city/{name}."""
    population: int = Field(..., ge=0, le=POPULATION_MAX)

    class Config:
        json_schema_extra = {
            "example": {
                "population": 731200
            }
        }

# --- Response Schemas ---

class CityDisplay(BaseModel):
    """Public view of a city, returned by GET /city/{name}. The ID is omitted."""
    name: str = Field(..., serialization_alias="Name")
    countrycode: str = Field(..., serialization_alias="CountryCode")
    district: str = Field(..., serialization_alias="District")
    population: int = Field(..., serialization_alias="Population")

    class Config:
        from_attributes = True # To map from SQLAlchemy model
        json_schema_extra = {
            "example": {
                "Name": "Amsterdam",
                "CountryCode": "NLD",
                "District": "Noord-Holland",
                "Population": 731200
            }
        }

class CityRecord(BaseModel):
    """Full city row, returned by POST /city and PUT /city/{name}."""
    id: int = Field(..., serialization_alias="ID")
    name: str = Field(..., serialization_alias="Name")
    countrycode: str = Field(..., serialization_alias="CountryCode")
    district: str = Field(..., serialization_alias="District")
    population: int = Field(..., serialization_alias="Population")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "ID": 4084,
                "Name": "NewCity",
                "CountryCode": "NLD",
                "District": "Noord-Holland",
                "Population": 100
            }
        }

class DeleteResult(BaseModel):
    successful: bool

    class Config:
        json_schema_extra = {"example": {"successful": True}}

class ErrorResponse(BaseModel):
    error: str
    detail: Optional[Any] = None

    class Config:
        json_schema_extra = {"example": {"error": "CityNotFound"}}
