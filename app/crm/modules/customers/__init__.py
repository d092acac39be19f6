"""
Customers module (JSON API).

Scope:
- Customers CRUD: list, create, fetch, full update (PUT), partial update (PATCH), delete
- Email is unique across customers (service pre-check + unique constraint)
"""

