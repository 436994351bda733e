"""Reference data: ports, service categories, boats and the coverage/capability links."""
from sqlmodel import Field, SQLModel


class Port(SQLModel, table=True):
    __tablename__ = "ports"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)


class UserPort(SQLModel, table=True):
    """Coverage: a provider services a port."""

    __tablename__ = "user_ports"
    user_id: int = Field(foreign_key="users.id", primary_key=True)
    port_id: int = Field(foreign_key="ports.id", primary_key=True, index=True)


class ServiceCategory(SQLModel, table=True):
    __tablename__ = "service_categories"
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True)


class UserServiceCategory(SQLModel, table=True):
    """Capability: a provider declares a service category."""

    __tablename__ = "user_service_categories"
    user_id: int = Field(foreign_key="users.id", primary_key=True)
    service_category_id: int = Field(foreign_key="service_categories.id", primary_key=True, index=True)


class Boat(SQLModel, table=True):
    __tablename__ = "boats"
    id: int | None = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="users.id", index=True)
    name: str
    port_id: int | None = Field(default=None, foreign_key="ports.id", index=True)  # home port
