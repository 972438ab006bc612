import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .core.db import Base


# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JsonDocument = JSON().with_variant(JSONB(), "postgresql")


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class StoreStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CLOSED = "closed"


class NavLocation(str, Enum):
    HEADER = "header"
    FOOTER = "footer"
    MOBILE = "mobile"


class PageType(str, Enum):
    HOMEPAGE = "homepage"
    ABOUT = "about"
    CONTACT = "contact"
    POLICY = "policy"
    CUSTOM = "custom"
    PRODUCT = "product"
    CATEGORY = "category"
    CART = "cart"
    CHECKOUT = "checkout"
    PROFILE = "profile"
    ORDER_TRACKING = "order_tracking"
    SEARCH = "search"


class SectionPosition(str, Enum):
    ABOVE = "above"
    BELOW = "below"


class Store(Base):
    __tablename__ = "stores"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    banner_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    status: Mapped[StoreStatus] = mapped_column(
        SqlEnum(StoreStatus, name="store_status", values_callable=_enum_values),
        default=StoreStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class StoreTheme(Base):
    __tablename__ = "store_themes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), default="Default Theme", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    colors: Mapped[dict[str, Any]] = mapped_column(JsonDocument, default=dict, nullable=False)
    typography: Mapped[dict[str, Any]] = mapped_column(JsonDocument, default=dict, nullable=False)
    layout: Mapped[dict[str, Any]] = mapped_column(JsonDocument, default=dict, nullable=False)


class StoreHeaderFooter(Base):
    __tablename__ = "store_header_footer"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("stores.id"), nullable=False, unique=True, index=True
    )
    header_config: Mapped[dict[str, Any]] = mapped_column(JsonDocument, default=dict, nullable=False)
    footer_config: Mapped[dict[str, Any]] = mapped_column(JsonDocument, default=dict, nullable=False)
    social_links: Mapped[dict[str, Any]] = mapped_column(JsonDocument, default=dict, nullable=False)


class StoreNavigation(Base):
    __tablename__ = "store_navigation"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    page_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("store_pages.id"), nullable=True)
    location: Mapped[NavLocation] = mapped_column(
        SqlEnum(NavLocation, name="nav_location", values_callable=_enum_values),
        default=NavLocation.HEADER,
        nullable=False,
    )
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_highlighted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    open_in_new_tab: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class StorePage(Base):
    __tablename__ = "store_pages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    store_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)
    # Free string: page types added later must still load
    page_type: Mapped[str] = mapped_column(String(32), default=PageType.CUSTOM.value, nullable=False)
    seo_title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    seo_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    show_header: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    show_footer: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    __table_args__ = (UniqueConstraint("store_id", "slug", name="uq_store_page_slug"),)


class PageSection(Base):
    __tablename__ = "page_sections"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    page_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("store_pages.id"), nullable=False, index=True)
    store_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)
    # Free string: section types added later must still load
    section_type: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    config: Mapped[dict[str, Any]] = mapped_column(JsonDocument, default=dict, nullable=False)
    is_visible: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    position: Mapped[Optional[str]] = mapped_column(String(16), default=SectionPosition.BELOW.value, nullable=True)
