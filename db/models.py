# db/models.py

import uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Numeric, JSON, ForeignKey
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


# Table Catégorie
class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    description = Column(Text)
    isactive = Column(Boolean, default=True, nullable=False)
    parentid = Column(String(36), ForeignKey("categories.id"))
    createdat = Column(DateTime(timezone=True), server_default=func.now())
    updatedat = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Table Produit (catalogue)
class Product(Base):
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=_uuid)
    itemcode = Column(String(50), index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    categoryid = Column(String(36), ForeignKey("categories.id"))
    baserate = Column(Numeric(14, 2), default=0, nullable=False)
    unit = Column(String(20), default="pcs")
    imageurl = Column(String)
    isactive = Column(Boolean, default=True, nullable=False)
    createdat = Column(DateTime(timezone=True), server_default=func.now())
    updatedat = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Table Client
class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    email = Column(String)
    phone = Column(String)
    company = Column(String)
    address = Column(Text)
    isactive = Column(Boolean, default=True, nullable=False)
    createdat = Column(DateTime(timezone=True), server_default=func.now())
    updatedat = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Table Devis
class Quote(Base):
    __tablename__ = "quotes"

    id = Column(String(36), primary_key=True, default=_uuid)
    quotenumber = Column(String(20), unique=True, nullable=False)
    title = Column(String, nullable=False)
    clientid = Column(String(36), ForeignKey("clients.id"))
    discountmode = Column(String(10), default="LINE_ITEM", nullable=False)  # LINE_ITEM | OVERALL | BOTH
    overalldiscount = Column(Numeric(7, 3), default=0, nullable=False)
    taxrate = Column(Numeric(7, 3), default=18, nullable=False)
    subtotal = Column(Numeric(14, 2), default=0, nullable=False)
    discount = Column(Numeric(14, 2), default=0, nullable=False)
    tax = Column(Numeric(14, 2), default=0, nullable=False)
    grandtotal = Column(Numeric(14, 2), default=0, nullable=False)
    status = Column(String(20), default="DRAFT", nullable=False, index=True)
    version = Column(Integer, default=1)
    isapproved = Column(Boolean, default=False, nullable=False)
    approvedby = Column(String)
    approvedat = Column(DateTime(timezone=True))
    approvalnotes = Column(Text)
    createdby = Column(String)
    createdat = Column(DateTime(timezone=True), server_default=func.now())
    updatedat = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Table Ligne de devis
class QuoteItem(Base):
    __tablename__ = "quote_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    quoteid = Column(String(36), ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    productid = Column(String(36), ForeignKey("products.id"))
    description = Column(Text)
    quantity = Column(Numeric(14, 3), default=1, nullable=False)
    rate = Column(Numeric(14, 2), default=0, nullable=False)
    discount = Column(Numeric(7, 3), default=0, nullable=False)
    linetotal = Column(Numeric(14, 2), default=0, nullable=False)
    order = Column(Integer, default=0, nullable=False)
    dimensions = Column(JSON)
    createdat = Column(DateTime(timezone=True), server_default=func.now())
    updatedat = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Table Révision de devis (append-only)
class QuoteRevision(Base):
    __tablename__ = "quote_revisions"

    id = Column(String(36), primary_key=True, default=_uuid)
    quoteid = Column(String(36), ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False)
    exported_by = Column(String)
    exported_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    changes = Column(Text)
    notes = Column(Text)


# Table Modèle PDF (un seul isdefault = True)
class PdfTemplate(Base):
    __tablename__ = "pdf_templates"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, nullable=False)
    description = Column(Text)
    companyname = Column(String)
    accentcolor = Column(String(7))
    headerbg = Column(String(7))
    footertext = Column(Text)
    currencysymbol = Column(String(10))
    isdefault = Column(Boolean, default=False, nullable=False, index=True)
    createdby = Column(String)
    createdat = Column(DateTime(timezone=True), server_default=func.now())
    updatedat = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


# Table Conditions générales (ligne unique)
class TermsConditions(Base):
    __tablename__ = "terms_conditions"

    id = Column(String(36), primary_key=True, default=_uuid)
    content = Column(Text, nullable=False)
    createdat = Column(DateTime(timezone=True), server_default=func.now())
    updatedat = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
