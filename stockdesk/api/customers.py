from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stockdesk.database import get_db
from stockdesk.schemas.customer import CustomerCreate, CustomerOut
from stockdesk.services import customer_service

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post("", response_model=CustomerOut, status_code=201)
def create_customer(data: CustomerCreate, db: Session = Depends(get_db)):
    return customer_service.create_customer(db, data)


@router.get("", response_model=list[CustomerOut])
def list_customers(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return customer_service.list_customers(db, skip=skip, limit=limit)


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: str, db: Session = Depends(get_db)):
    customer = customer_service.get_customer(db, customer_id)
    if not customer:
        raise HTTPException(404, "Customer not found")
    return customer
