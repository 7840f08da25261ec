# src/world_city_api/seed.py
import argparse
import asyncio
import csv
from pathlib import Path

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from . import database
from .models import City

# --- Configuration ---
BATCH_SIZE = 1000
CSV_COLUMNS = ("ID", "Name", "CountryCode", "District", "Population")


def read_cities_csv(path):
    """
    Reads city rows from a CSV file with an ID,Name,CountryCode,District,Population header.
    Rows with a missing name or non-integer ID/Population are skipped.

    Returns:
        A tuple (cities, skipped) where cities is a list of column dicts.
    """
    cities = []
    skipped = 0
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = [c for c in CSV_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"CSV file is missing columns: {', '.join(missing)}")

        for row in reader:
            name = (row["Name"] or "").strip()
            try:
                city_id = int(row["ID"])
                population = int(row["Population"]) if row["Population"] else 0
            except (TypeError, ValueError):
                skipped += 1
                continue
            if not name or population < 0:
                skipped += 1
                continue
            cities.append({
                "id": city_id, "name": name,
                "countrycode": (row["CountryCode"] or "").strip(),
                "district": (row["District"] or "").strip(),
                "population": population,
            })
    return cities, skipped


async def seed_cities_to_db(db: AsyncSession, cities_data: list, replace: bool = False):
    """
    Inserts new cities and updates existing ones (matched on ID), in batches.

    Returns:
        A tuple (inserted, updated).
    """
    if replace:
        await db.execute(delete(City))

    total_inserted = 0
    total_updated = 0

    for i in range(0, len(cities_data), BATCH_SIZE):
        batch = cities_data[i:i + BATCH_SIZE]
        print(f"Processing batch {i // BATCH_SIZE + 1}...")
        batch_ids = [c["id"] for c in batch]
        result = await db.execute(select(City).where(City.id.in_(batch_ids)))
        existing_cities_map = {city.id: city for city in result.scalars().all()}

        for city_data in batch:
            city_to_update = existing_cities_map.get(city_data["id"])
            if city_to_update is not None:
                city_to_update.name = city_data["name"]
                city_to_update.countrycode = city_data["countrycode"]
                city_to_update.district = city_data["district"]
                city_to_update.population = city_data["population"]
                total_updated += 1
            else:
                new_city = City(**city_data)
                db.add(new_city)
                existing_cities_map[new_city.id] = new_city
                total_inserted += 1
        await db.flush()

    await db.commit()
    print(f"Successfully committed changes: {total_inserted} inserted, {total_updated} updated.")
    return total_inserted, total_updated


async def run(csv_path, replace: bool = False, database_url: str | None = None):
    """Creates the city table if needed and loads the CSV into it."""
    # init_engine keeps an existing engine, which may point elsewhere
    await database.dispose_engine()
    engine = database.init_engine(database_url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(database.Base.metadata.create_all)
            print("Database tables checked/created.")

        cities_data, skipped = read_cities_csv(csv_path)
        print(f"Read {len(cities_data)} cities from {csv_path} ({skipped} rows skipped).")
        async with database.AsyncSessionLocal() as session:
            return await seed_cities_to_db(session, cities_data, replace=replace)
    finally:
        await database.dispose_engine()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Load cities from a CSV file into the city table.")
    parser.add_argument("csv_path", type=Path, help="CSV file with ID,Name,CountryCode,District,Population columns")
    parser.add_argument("--replace", action="store_true", help="delete all existing cities first")
    args = parser.parse_args(argv)

    print("Starting city seeding process...")
    asyncio.run(run(args.csv_path, replace=args.replace))
    print("City seeding process finished.")


if __name__ == "__main__":
    main()
