from typing import List, Optional
from sqlalchemy import String, Integer, Numeric, ForeignKey, Table, Column, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.db.session import Base

# таблица связей м2м, со своим id - дубли пар схемой не запрещены
organization_activities = Table(
    "organization_activities",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("organization_id", Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
    Column("activity_id", Integer, ForeignKey("activities.id", ondelete="CASCADE"), nullable=False),
)

class Building(Base):
    __tablename__ = "buildings"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    address: Mapped[str] = mapped_column(String, nullable=False)
    # decimal(10,8)/decimal(11,8) в базе, float в питоне
    latitude: Mapped[float] = mapped_column(Numeric(10, 8, asdecimal=False), nullable=False)
    longitude: Mapped[float] = mapped_column(Numeric(11, 8, asdecimal=False), nullable=False)

    organizations: Mapped[List["Organization"]] = relationship(back_populates="building", cascade="all, delete-orphan")

class Activity(Base):
    __tablename__ = "activities"
    __table_args__ = (Index("ix_activities_parent_id_level", "parent_id", "level"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    # дерево категорий (adjacency list), корень - уровень 1
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("activities.id", ondelete="CASCADE"), nullable=True)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    parent: Mapped[Optional["Activity"]] = relationship("Activity", back_populates="children", remote_side=[id])
    children: Mapped[List["Activity"]] = relationship("Activity", back_populates="parent", cascade="all, delete-orphan")
    organizations: Mapped[List["Organization"]] = relationship(secondary=organization_activities, back_populates="activities")

class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String, index=True)
    building_id: Mapped[int] = mapped_column(ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False)

    building: Mapped["Building"] = relationship(back_populates="organizations")
    activities: Mapped[List["Activity"]] = relationship(secondary=organization_activities, back_populates="organizations", order_by="Activity.id")
    phones: Mapped[List["OrganizationPhone"]] = relationship(back_populates="organization", cascade="all, delete-orphan", order_by="OrganizationPhone.id")

class OrganizationPhone(Base):
    __tablename__ = "organization_phones"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    phone_number: Mapped[str] = mapped_column(String, nullable=False)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id", ondelete="CASCADE"))

    organization: Mapped["Organization"] = relationship(back_populates="phones")
