from enum import Enum

# Column sizes of the classic "world" sample database's city table.
NAME_MAX_LENGTH = 35
COUNTRY_CODE_MAX_LENGTH = 3
DISTRICT_MAX_LENGTH = 20

# pg_advisory_xact_lock key held while a city ID is assigned.
CITY_ID_LOCK_KEY = 4084


class ErrorCode(str, Enum):
    """
    Values of the "error" field in JSON error responses.
    """
    CITY_NOT_FOUND = 'CityNotFound'
    VALIDATION_ERROR = 'ValidationError'
    INTEGRITY_ERROR = 'IntegrityError'
    DATA_ERROR = 'DataError'
    OPERATIONAL_ERROR = 'OperationalError'
