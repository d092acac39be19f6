from __future__ import annotations

from sqlalchemy import Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.crm.models import Base


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        # Authoritative guard for email uniqueness; the service pre-check only gives a nicer error.
        UniqueConstraint("email", name="uq_customers_email"),
        # Never hand out the id of a deleted row again.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Customer id={self.id} email={self.email!r}>"
