"""
Domain repository: typed CRUD over the dairy collections.

The repository owns the in-memory collections for one record store. Reads
hand out copies of the collection lists; every write validates, mutates
memory, then persists all collections.
"""
import logging
import random
import re
import threading
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

import seed
from database import RecordStore
from errors import NotFound, PersistenceError, ValidationError
from ledger import StockLedger
from pricing import InvoicePricingEngine
from schemas import (
    ConversionLog,
    ConversionLogIn,
    DailyRecord,
    DashboardData,
    Delivery,
    DeliveryRoute,
    DeliveryRouteIn,
    DeliveryStats,
    Invoice,
    InvoiceIn,
    Product,
    PricingRequest,
    PricingResponse,
    SalaryPaymentIn,
    SalaryRecord,
    SalaryUpdate,
    Staff,
    StaffIn,
    dump,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Collection key -> record model
COLLECTIONS: Dict[str, Type[BaseModel]] = {
    "products": Product,
    "staff": Staff,
    "deliveries": Delivery,
    "dailyRecords": DailyRecord,
    "invoices": Invoice,
    "conversionLogs": ConversionLog,
    "deliveryRoutes": DeliveryRoute,
    "salaryRecords": SalaryRecord,
}

ID_PREFIXES: Dict[str, str] = {
    "staff": "S",
    "deliveries": "D",
    "invoices": "I",
    "conversionLogs": "C",
    "deliveryRoutes": "R",
    "salaryRecords": "SR",
}


def format_id(prefix: str, seq: int) -> str:
    return f"{prefix}{seq:03d}"


def id_sequence(prefix: str, record_id: str) -> Optional[int]:
    m = re.fullmatch(re.escape(prefix) + r"(\d+)", record_id or "")
    return int(m.group(1)) if m else None


def parse(model: Type[BaseModel], data: Any) -> BaseModel:
    """Validate caller data into ``model``, raising the domain ValidationError."""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ())) or model.__name__
        raise ValidationError(f"{where}: {first.get('msg')}") from e


class DairyRepository:
    def __init__(
        self,
        store: RecordStore,
        *,
        pricing: Optional[InvoicePricingEngine] = None,
        ledger: Optional[StockLedger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
        admin_password: str = "admin123",
    ):
        self.store = store
        self.pricing = pricing or InvoicePricingEngine()
        self.ledger = ledger or StockLedger()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.rng = rng or random.Random()
        # Guards every collection, the counters and the credential together
        self._lock = threading.RLock()
        self.load(admin_password)

    # -----------------------------
    # Loading & persistence
    # -----------------------------

    def today(self) -> date:
        return self.clock().date()

    def _load(self, key: str, factory: Callable[[], List[BaseModel]]) -> List[BaseModel]:
        raw = self.store.get(key, None)
        if raw is None:
            return factory()
        model = COLLECTIONS[key]
        try:
            return [model.model_validate(r) for r in raw]
        except (PydanticValidationError, TypeError):
            logger.error("Stored %r does not match the %s schema, reseeding", key, model.__name__)
            return factory()

    def load(self, default_admin_password: str = "admin123") -> None:
        stored_version = self.store.get("schemaVersion", SCHEMA_VERSION)
        if isinstance(stored_version, int) and stored_version > SCHEMA_VERSION:
            logger.warning("Stored data has schema version %s, newer than %s", stored_version, SCHEMA_VERSION)

        today = self.today()
        self.products: List[Product] = self._load("products", lambda: seed.init_products(self.rng))
        self.staff: List[Staff] = self._load("staff", seed.init_staff)
        self.deliveries: List[Delivery] = self._load("deliveries", lambda: seed.init_deliveries(self.staff))
        self.daily_records: List[DailyRecord] = self._load(
            "dailyRecords", lambda: seed.init_daily_records(today, self.rng))
        self.invoices: List[Invoice] = self._load("invoices", lambda: seed.init_invoices(today))
        self.conversion_logs: List[ConversionLog] = self._load(
            "conversionLogs", lambda: seed.init_conversion_logs(today))
        self.delivery_routes: List[DeliveryRoute] = self._load("deliveryRoutes", seed.init_delivery_routes)
        self.salary_records: List[SalaryRecord] = self._load(
            "salaryRecords", lambda: seed.init_salary_records(today))

        password = self.store.get("adminPassword", default_admin_password)
        self._admin_password = password if isinstance(password, str) and password else default_admin_password

        stored_counters = self.store.get("counters", {})
        if not isinstance(stored_counters, dict):
            logger.error("Stored counters are corrupt, rebuilding from records")
            stored_counters = {}
        self.counters: Dict[str, int] = {}
        for key, prefix in ID_PREFIXES.items():
            seqs = [id_sequence(prefix, r.id) or 0 for r in self._collection(key)]
            stored = stored_counters.get(key, 0)
            self.counters[key] = max([stored if isinstance(stored, int) else 0] + seqs)

        self.persist_all()

    def _collection(self, key: str) -> List[BaseModel]:
        return {
            "products": self.products,
            "staff": self.staff,
            "deliveries": self.deliveries,
            "dailyRecords": self.daily_records,
            "invoices": self.invoices,
            "conversionLogs": self.conversion_logs,
            "deliveryRoutes": self.delivery_routes,
            "salaryRecords": self.salary_records,
        }[key]

    def _write(self, key: str, value: Any) -> None:
        try:
            self.store.set(key, value)
        except PersistenceError as e:
            # Memory stays authoritative for the rest of the process
            logger.error("Persisting %r failed: %s", key, e.message)

    def persist_all(self) -> None:
        with self._lock:
            for key in COLLECTIONS:
                self._write(key, [dump(r) for r in self._collection(key)])
            self._write("counters", dict(self.counters))
            self._write("adminPassword", self._admin_password)
            self._write("schemaVersion", SCHEMA_VERSION)

    def next_id(self, key: str) -> str:
        self.counters[key] += 1
        return format_id(ID_PREFIXES[key], self.counters[key])

    # -----------------------------
    # Products
    # -----------------------------

    def get_products(self) -> List[Product]:
        return list(self.products)

    def get_product(self, product_id: str) -> Product:
        product = next((p for p in self.products if p.id == product_id), None)
        if product is None:
            raise NotFound("Product not found")
        return product

    def update_product(self, data) -> Product:
        product = parse(Product, data)
        with self._lock:
            for i, p in enumerate(self.products):
                if p.id == product.id:
                    self.products[i] = product
                    self.persist_all()
                    return product
        raise NotFound("Product not found")

    # -----------------------------
    # Staff
    # -----------------------------

    def get_staff(self) -> List[Staff]:
        return list(self.staff)

    def get_staff_member(self, staff_id: str) -> Staff:
        member = next((s for s in self.staff if s.id == staff_id), None)
        if member is None:
            raise NotFound("Staff not found")
        return member

    def add_staff(self, data) -> Staff:
        payload = parse(StaffIn, data)
        with self._lock:
            member = Staff(id=self.next_id("staff"), **payload.model_dump())
            self.staff.append(member)
            self.persist_all()
        logger.info("Added staff %s (%s)", member.id, member.role)
        return member

    def update_staff_salary(self, staff_id: str, salary: float) -> Staff:
        update = parse(SalaryUpdate, {"salary": salary})
        with self._lock:
            member = self.get_staff_member(staff_id)
            member.salary = update.salary
            self.persist_all()
        return member

    def delete_staff(self, staff_id: str) -> None:
        with self._lock:
            remaining = [s for s in self.staff if s.id != staff_id]
            if len(remaining) == len(self.staff):
                raise NotFound("Staff not found")
            self.staff[:] = remaining
            self.persist_all()
        logger.info("Deleted staff %s", staff_id)

    # -----------------------------
    # Deliveries
    # -----------------------------

    def get_deliveries(self) -> List[Delivery]:
        return list(self.deliveries)

    def get_deliveries_by_staff(self, staff_id: str) -> List[Delivery]:
        return [d for d in self.deliveries if d.assigned_to == staff_id]

    def update_delivery(self, data) -> Delivery:
        delivery = parse(Delivery, data)
        with self._lock:
            index = next((i for i, d in enumerate(self.deliveries) if d.id == delivery.id), None)
            if index is None:
                raise NotFound("Delivery not found")
            current = self.deliveries[index]
            if current.status != "Pending":
                raise ValidationError(f"Delivery {current.id} is already {current.status}.")
            if delivery.assigned_to != current.assigned_to:
                raise ValidationError("A delivery cannot be reassigned.")
            if delivery.status == "Pending":
                raise ValidationError("Delivery status must be Delivered or Returned.")
            if delivery.status == "Returned" and not (delivery.reason or "").strip():
                raise ValidationError("Please provide a reason for the return.")
            if delivery.status == "Delivered":
                delivery = delivery.model_copy(update={"reason": None, "photo": None})
            self.deliveries[index] = delivery
            self.persist_all()
        return delivery

    # -----------------------------
    # Invoices
    # -----------------------------

    def get_invoices(self) -> List[Invoice]:
        return list(self.invoices)

    def preview_invoice(self, data) -> PricingResponse:
        request = parse(PricingRequest, data)
        return self.pricing.calculate_pricing(request.items)

    def create_invoice(self, data) -> Invoice:
        payload = parse(InvoiceIn, data)
        with self._lock:
            pricing = self.pricing.calculate_pricing(payload.items)
            invoice = Invoice(
                id=self.next_id("invoices"),
                customer_name=payload.customer_name,
                date=self.today(),
                items=pricing.items,
                total=pricing.total,
                submitted_by=payload.submitted_by,
            )
            self.ledger.apply_invoice(self.products, invoice)
            self.invoices.insert(0, invoice)
            self.persist_all()
        logger.info("Invoice %s created, total %s", invoice.id, invoice.total)
        return invoice

    # -----------------------------
    # Production
    # -----------------------------

    def get_conversion_logs(self) -> List[ConversionLog]:
        return list(self.conversion_logs)

    def add_conversion_log(self, data) -> ConversionLog:
        payload = parse(ConversionLogIn, data)
        with self._lock:
            log = ConversionLog(id=self.next_id("conversionLogs"), date=self.today(), **payload.model_dump())
            self.ledger.apply_conversion(self.products, log)
            self.conversion_logs.insert(0, log)
            self.persist_all()
        return log

    # -----------------------------
    # Routes
    # -----------------------------

    def get_delivery_routes(self) -> List[DeliveryRoute]:
        return list(self.delivery_routes)

    def create_delivery_route(self, data) -> DeliveryRoute:
        payload = parse(DeliveryRouteIn, data)
        with self._lock:
            member = self.get_staff_member(payload.staff_id)
            if member.role != "Delivery":
                raise ValidationError(f"{member.name} is not delivery staff.")
            route = DeliveryRoute(id=self.next_id("deliveryRoutes"), **payload.model_dump())
            self.delivery_routes.append(route)
            self.persist_all()
        return route

    # -----------------------------
    # Salaries
    # -----------------------------

    def get_salary_records(self) -> List[SalaryRecord]:
        return list(self.salary_records)

    def pay_salary(self, data) -> SalaryRecord:
        payload = parse(SalaryPaymentIn, data)
        with self._lock:
            self.get_staff_member(payload.staff_id)
            record = SalaryRecord(
                id=self.next_id("salaryRecords"), payment_date=self.today(), **payload.model_dump())
            self.salary_records.insert(0, record)
            self.persist_all()
        logger.info("Paid %s to %s for %s", record.amount, record.staff_id, record.for_month)
        return record

    # -----------------------------
    # Dashboard
    # -----------------------------

    def get_dashboard_data(self) -> DashboardData:
        stats = DeliveryStats(
            delivered=sum(1 for d in self.deliveries if d.status == "Delivered"),
            pending=sum(1 for d in self.deliveries if d.status == "Pending"),
            returned=sum(1 for d in self.deliveries if d.status == "Returned"),
        )
        return DashboardData(daily_records=list(self.daily_records), delivery_stats=stats)

    # -----------------------------
    # Admin credential
    # -----------------------------

    @property
    def admin_password(self) -> str:
        return self._admin_password

    def set_admin_password(self, password: str) -> None:
        with self._lock:
            self._admin_password = password
            self.persist_all()
