# src/world_city_api/exceptions.py


class CityNotFoundError(Exception):
    """Raised when no city row matches the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"City {name!r} not found")
