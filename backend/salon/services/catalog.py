"""
Salon Booking Backend — Treatment Catalog Seeder
===================================================

What:  The fixed treatment catalog and `ensure_catalog()`, which inserts any
       entry missing from storage.
When:  Awaited once in the application lifespan, before the server accepts
       traffic. Running it again is a no-op.
"""

import logging
from typing import List, NamedTuple

from salon.services.treatment_store import TreatmentStore

logger = logging.getLogger(__name__)


class CatalogEntry(NamedTuple):
    name: str
    category: str
    icon: str


CATALOG: List[CatalogEntry] = [
    CatalogEntry(name="Haircut", category="cut", icon="icon1.png"),
    CatalogEntry(name="Hair wash", category="wash", icon="icon2.png"),
    CatalogEntry(name="Haircut and wash", category="cutAndWash", icon="icon3.png"),
    CatalogEntry(name="Hair styling", category="styling", icon="icon4.png"),
]


async def ensure_catalog(store: TreatmentStore, catalog: List[CatalogEntry] = CATALOG) -> int:
    """
    Makes sure every catalog entry exists; returns how many were created.

    Entries are matched by name. Existing rows are left untouched.
    """
    created = 0
    for position, entry in enumerate(catalog, start=1):
        if await store.get_by_name(entry.name) is not None:
            continue
        treatment = await store.add(
            name=entry.name,
            category=entry.category,
            icon=entry.icon,
            sort_order=position,
        )
        if treatment is not None:
            created += 1
            logger.info("Treatment created: %s", entry.name)

    if created:
        logger.info("Catalog seeded: %d treatment(s) created", created)
    else:
        logger.info("Catalog already complete (%d entries)", len(catalog))
    return created
