"""CRUD endpoints for products."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Product
from ..schemas import ProductCreate, ProductListResponse, ProductResponse, ProductUpdate

router = APIRouter(prefix="/api/products", tags=["products"])


def _get_product(db: Session, sku: str) -> Product:
    product = db.query(Product).filter(Product.sku == sku).first()
    if not product:
        raise HTTPException(404, f"Product {sku} not found")
    return product


@router.post("", response_model=ProductResponse, status_code=201)
def create_product(body: ProductCreate, db: Session = Depends(get_db)):
    if db.query(Product).filter(Product.sku == body.sku).first():
        raise HTTPException(409, f"Product {body.sku} already exists")

    product = Product(**body.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@router.get("", response_model=ProductListResponse)
def list_products(category: str | None = None, db: Session = Depends(get_db)):
    q = db.query(Product)
    if category:
        q = q.filter(Product.category == category)
    products = q.order_by(Product.created_at.desc()).all()
    return ProductListResponse(products=products, total=len(products))


@router.get("/{sku}", response_model=ProductResponse)
def get_product(sku: str, db: Session = Depends(get_db)):
    return _get_product(db, sku)


@router.put("/{sku}", response_model=ProductResponse)
def update_product(sku: str, body: ProductUpdate, db: Session = Depends(get_db)):
    product = _get_product(db, sku)
    for key, val in body.model_dump(exclude_unset=True).items():
        setattr(product, key, val)
    db.commit()
    db.refresh(product)
    return product


@router.delete("/{sku}", status_code=204)
def delete_product(sku: str, db: Session = Depends(get_db)):
    product = _get_product(db, sku)
    db.delete(product)
    db.commit()
