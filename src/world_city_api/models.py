from sqlalchemy import Column, Integer, String
from .constants import NAME_MAX_LENGTH, COUNTRY_CODE_MAX_LENGTH, DISTRICT_MAX_LENGTH
from .database import Base

class City(Base):
    __tablename__ = "city"

    # IDs are assigned by crud.create_city (max + 1), not by the database.
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(NAME_MAX_LENGTH), nullable=False, index=True, default="")
    countrycode = Column(String(COUNTRY_CODE_MAX_LENGTH), nullable=False, default="")
    district = Column(String(DISTRICT_MAX_LENGTH), nullable=False, default="")
    population = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<City id={self.id} name={self.name!r} countrycode={self.countrycode!r}>"
