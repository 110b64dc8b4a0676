"""
In-process operation surface consumed by the admin and staff screens.

Every call awaits a fixed simulated latency before touching the repository.
Auth calls report failures as ``OperationResult`` messages; the CRUD calls
raise ``errors.DairyError`` subclasses for the caller to display.
"""
import asyncio
import logging
import random
from typing import List, Optional

from auth import AuthGate
from config import Settings
from database import create_record_store
from errors import DairyError
from repository import DairyRepository
from schemas import (
    ConversionLog,
    DashboardData,
    Delivery,
    DeliveryRoute,
    Invoice,
    LoginResult,
    OperationResult,
    PricingResponse,
    Product,
    SalaryRecord,
    Staff,
)

logger = logging.getLogger(__name__)


class DairyApi:
    def __init__(self, repository: DairyRepository, auth: AuthGate, *,
                 latency: float = 0.5, dashboard_latency: float = 0.8):
        self.repository = repository
        self.auth = auth
        self.latency = latency
        self.dashboard_latency = dashboard_latency

    async def simulate_delay(self, delay: Optional[float] = None) -> None:
        await asyncio.sleep(self.latency if delay is None else delay)

    # -----------------------------
    # Auth
    # -----------------------------

    async def login(self, user_id: str, password: str) -> LoginResult:
        await self.simulate_delay()
        return self.auth.login(user_id, password)

    async def change_admin_password(self, old_password: str, new_password: str,
                                    confirm_password: Optional[str] = None) -> OperationResult:
        await self.simulate_delay()
        try:
            self.auth.change_admin_password(old_password, new_password, confirm_password)
        except DairyError as e:
            return OperationResult(success=False, message=e.message)
        return OperationResult(success=True, message="Password updated successfully.")

    async def request_admin_password_reset(self, admin_id: str) -> OperationResult:
        await self.simulate_delay()
        try:
            reset = self.auth.request_password_reset(admin_id)
        except DairyError as e:
            return OperationResult(success=False, message=e.message)
        minutes = int(self.auth.token_ttl.total_seconds() // 60)
        return OperationResult(
            success=True,
            message=f"Token generated. It will expire in {minutes} minutes.",
            token=reset.token,
        )

    async def reset_admin_password(self, token: str, new_password: str,
                                   confirm_password: Optional[str] = None) -> OperationResult:
        await self.simulate_delay()
        try:
            self.auth.reset_password(token, new_password, confirm_password)
        except DairyError as e:
            return OperationResult(success=False, message=e.message)
        return OperationResult(success=True, message="Password reset successfully.")

    # -----------------------------
    # Admin panel
    # -----------------------------

    async def get_dashboard_data(self) -> DashboardData:
        await self.simulate_delay(self.dashboard_latency)
        return self.repository.get_dashboard_data()

    async def get_products(self) -> List[Product]:
        await self.simulate_delay()
        return self.repository.get_products()

    async def update_product(self, product) -> Product:
        await self.simulate_delay()
        return self.repository.update_product(product)

    async def get_staff(self) -> List[Staff]:
        await self.simulate_delay()
        return self.repository.get_staff()

    async def add_staff(self, staff) -> Staff:
        await self.simulate_delay()
        return self.repository.add_staff(staff)

    async def update_staff_salary(self, staff_id: str, salary: float) -> Staff:
        await self.simulate_delay()
        return self.repository.update_staff_salary(staff_id, salary)

    async def delete_staff(self, staff_id: str) -> OperationResult:
        await self.simulate_delay()
        self.repository.delete_staff(staff_id)
        return OperationResult(success=True, message="Staff deleted.")

    async def get_deliveries(self) -> List[Delivery]:
        await self.simulate_delay()
        return self.repository.get_deliveries()

    async def get_invoices(self) -> List[Invoice]:
        await self.simulate_delay()
        return self.repository.get_invoices()

    async def get_conversion_logs(self) -> List[ConversionLog]:
        await self.simulate_delay()
        return self.repository.get_conversion_logs()

    async def get_delivery_routes(self) -> List[DeliveryRoute]:
        await self.simulate_delay()
        return self.repository.get_delivery_routes()

    async def create_delivery_route(self, route) -> DeliveryRoute:
        await self.simulate_delay()
        return self.repository.create_delivery_route(route)

    async def get_salary_records(self) -> List[SalaryRecord]:
        await self.simulate_delay()
        return self.repository.get_salary_records()

    async def pay_salary(self, payment) -> SalaryRecord:
        await self.simulate_delay()
        return self.repository.pay_salary(payment)

    # -----------------------------
    # Staff panel
    # -----------------------------

    async def get_deliveries_by_staff(self, staff_id: str) -> List[Delivery]:
        await self.simulate_delay()
        return self.repository.get_deliveries_by_staff(staff_id)

    async def update_delivery(self, delivery) -> Delivery:
        await self.simulate_delay()
        return self.repository.update_delivery(delivery)

    async def preview_invoice(self, request) -> PricingResponse:
        await self.simulate_delay(0)
        return self.repository.preview_invoice(request)

    async def create_invoice(self, invoice) -> Invoice:
        await self.simulate_delay()
        return self.repository.create_invoice(invoice)

    async def add_conversion_log(self, log) -> ConversionLog:
        await self.simulate_delay()
        return self.repository.add_conversion_log(log)


def build_api(settings: Settings, *, rng: Optional[random.Random] = None) -> DairyApi:
    store = create_record_store(settings)
    repository = DairyRepository(store, rng=rng, admin_password=settings.admin_password)
    auth = AuthGate(repository)
    return DairyApi(
        repository,
        auth,
        latency=settings.latency_ms / 1000,
        dashboard_latency=settings.dashboard_latency_ms / 1000,
    )
