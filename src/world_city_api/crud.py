# src/world_city_api/crud.py
import asyncio
import logging
import weakref
from typing import List

from sqlalchemy import delete, func, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from . import models
from . import schemas
from .constants import CITY_ID_LOCK_KEY

logger = logging.getLogger(__name__)

# One lock per event loop; asyncio locks cannot be shared across loops.
_create_locks = weakref.WeakKeyDictionary()


async def get_cities_by_name(db: AsyncSession, name: str) -> List[models.City]:
    """
    Retrieves every city whose name equals `name` exactly.

    Args:
        db: The asynchronous database session.
        name: The city name to match.

    Returns:
        A list of City model instances, empty if nothing matched.
    """
    result = await db.execute(select(models.City).where(models.City.name == name))
    return result.scalars().all()

async def get_next_city_id(db: AsyncSession) -> int:
    """
    Returns the current maximum city ID plus one (1 for an empty table).
    """
    result = await db.execute(select(func.coalesce(func.max(models.City.id), 0)))
    return result.scalar_one() + 1

def _create_lock() -> asyncio.Lock:
    """The lock serializing creates on the running event loop."""
    loop = asyncio.get_running_loop()
    lock = _create_locks.get(loop)
    if lock is None:
        lock = _create_locks[loop] = asyncio.Lock()
    return lock

async def create_city(db: AsyncSession, city: schemas.CityCreate) -> models.City:
    """
    Inserts a new city with ID = max existing ID + 1.

    Creates in this process run one at a time, and on PostgreSQL a
    transaction-scoped advisory lock extends that across processes. Other
    backends can still see two writers read the same maximum; the loser's
    insert violates the primary key, so it rolls back and retries with a
    fresh maximum until it succeeds.

    Args:
        db: The asynchronous database session.
        city: The city creation data (from Pydantic schema).

    Returns:
        The newly created City model instance.

    Raises:
        IntegrityError: If the insert violated a constraint other than the ID.
    """
    async with _create_lock():
        attempt = 0
        while True:
            attempt += 1
            if db.get_bind().dialect.name == "postgresql":
                await db.execute(
                    text("SELECT pg_advisory_xact_lock(:key)"), {"key": CITY_ID_LOCK_KEY}
                )
            new_id = await get_next_city_id(db)
            db_city = models.City(
                id=new_id,
                name=city.name,
                countrycode=city.countrycode,
                district=city.district,
                population=city.population,
            )
            db.add(db_city)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                taken = await db.scalar(select(models.City.id).where(models.City.id == new_id))
                if taken is None:
                    raise
                logger.warning(f"City id {new_id} taken by a concurrent insert, retrying (attempt {attempt})")
                continue
            logger.info(f"Created city id={new_id} name={city.name!r}")
            return db_city

async def update_city_population(db: AsyncSession, name: str, population: int) -> List[models.City]:
    """
    Sets the population of every city named `name`, then re-reads them.

    Returns:
        The matching City rows after the update, empty if none exist.
    """
    result = await db.execute(
        update(models.City)
        .where(models.City.name == name)
        .values(population=population)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    logger.debug(f"Updated population of {result.rowcount} city row(s) named {name!r}")
    return await get_cities_by_name(db, name)

async def delete_cities_by_name(db: AsyncSession, name: str) -> int:
    """
    Deletes every city named `name`.

    Returns:
        The number of deleted rows.
    """
    result = await db.execute(
        delete(models.City)
        .where(models.City.name == name)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    logger.info(f"Deleted {result.rowcount} city row(s) named {name!r}")
    return result.rowcount
