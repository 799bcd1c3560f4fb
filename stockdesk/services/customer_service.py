import logging

from sqlalchemy.orm import Session

from stockdesk.models.customer import Customer
from stockdesk.schemas.customer import CustomerCreate

logger = logging.getLogger(__name__)


def create_customer(db: Session, data: CustomerCreate) -> Customer:
    customer = Customer(**data.model_dump())
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


def get_customer(db: Session, customer_id: str) -> Customer | None:
    return db.query(Customer).filter(Customer.id == customer_id).first()


def get_customer_by_email(db: Session, email: str) -> Customer | None:
    return db.query(Customer).filter(Customer.email == email).first()


def list_customers(db: Session, skip: int = 0, limit: int = 100) -> list[Customer]:
    return db.query(Customer).order_by(Customer.name).offset(skip).limit(limit).all()


def resolve_customer(db: Session, name: str, email: str | None, phone: str | None = None) -> Customer | None:
    """Find a customer by e-mail, creating one when a name is known.

    Lookup and insert are separate statements, so two simultaneous orders
    for a new e-mail can both create a customer.
    """
    if not email:
        return None
    customer = get_customer_by_email(db, email)
    if customer is None and name:
        customer = Customer(name=name, email=email, phone=phone)
        db.add(customer)
        db.flush()
        logger.info("Created customer %s <%s> during order placement", name, email)
    return customer
