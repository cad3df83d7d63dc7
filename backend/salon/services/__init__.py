# Services package init
"""
Salon Booking Backend — Services Layer
=========================================

Service Inventory:
    - credentials.py:     PasswordHasher (bcrypt), TokenIssuer, token_digest
    - user_store.py:      UserStore: users and their bookings
    - treatment_store.py: TreatmentStore: the treatment catalog
    - catalog.py:         CATALOG and ensure_catalog() (startup seeding)
    - authentication.py:  get_current_user dependency (Authorization header → User)

Stores take the request's AsyncSession; routes never touch SQLAlchemy directly.
"""
