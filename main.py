import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from api import DairyApi, build_api
from config import get_settings
from errors import DairyError, NotFound, ValidationError
from schemas import (
    ConversionLog,
    ConversionLogIn,
    DashboardData,
    Delivery,
    DeliveryRoute,
    DeliveryRouteIn,
    Invoice,
    InvoiceIn,
    LoginRequest,
    LoginResult,
    OperationResult,
    PasswordChangeRequest,
    PasswordResetRequest,
    PricingRequest,
    PricingResponse,
    Product,
    ResetTokenRequest,
    SalaryPaymentIn,
    SalaryRecord,
    SalaryUpdate,
    Staff,
    StaffIn,
)
from seed import APP_NAME

logger = logging.getLogger(__name__)

settings = get_settings()

# -----------------------------
# Utilities
# -----------------------------

# Auth routes report their failures in OperationResult, so only CRUD errors map here
STATUS_CODES = [
    (NotFound, 404),
    (ValidationError, 400),
]


def http_error(e: DairyError) -> HTTPException:
    for cls, code in STATUS_CODES:
        if isinstance(e, cls):
            return HTTPException(status_code=code, detail=e.message)
    return HTTPException(status_code=500, detail=e.message)


_api: Optional[DairyApi] = None


def get_api() -> DairyApi:
    global _api
    if _api is None:
        _api = build_api(settings)
    return _api


# -----------------------------
# FastAPI App
# -----------------------------
app = FastAPI(title=f"{APP_NAME} API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def root(api: DairyApi = Depends(get_api)):
    return {"message": f"{APP_NAME} Backend Running", "store": type(api.repository.store).__name__}


@app.get("/health")
def health(api: DairyApi = Depends(get_api)):
    return {"status": "ok", "products": len(api.repository.get_products())}


# -----------------------------
# Auth
# -----------------------------
@app.post("/auth/login", response_model=LoginResult)
async def login(payload: LoginRequest, api: DairyApi = Depends(get_api)):
    return await api.login(payload.id, payload.password)


@app.post("/auth/password", response_model=OperationResult)
async def change_password(payload: PasswordChangeRequest, api: DairyApi = Depends(get_api)):
    return await api.change_admin_password(payload.old_password, payload.new_password, payload.confirm_password)


@app.post("/auth/reset-request", response_model=OperationResult)
async def request_reset(payload: ResetTokenRequest, api: DairyApi = Depends(get_api)):
    return await api.request_admin_password_reset(payload.admin_id)


@app.post("/auth/reset", response_model=OperationResult)
async def reset_password(payload: PasswordResetRequest, api: DairyApi = Depends(get_api)):
    return await api.reset_admin_password(payload.token, payload.new_password, payload.confirm_password)


# -----------------------------
# Dashboard & Products
# -----------------------------
@app.get("/dashboard", response_model=DashboardData)
async def dashboard(api: DairyApi = Depends(get_api)):
    return await api.get_dashboard_data()


@app.get("/products", response_model=List[Product])
async def list_products(api: DairyApi = Depends(get_api)):
    return await api.get_products()


@app.put("/products/{product_id}", response_model=Product)
async def update_product(product_id: str, payload: Product, api: DairyApi = Depends(get_api)):
    try:
        return await api.update_product(payload.model_copy(update={"id": product_id}))
    except DairyError as e:
        raise http_error(e)


# -----------------------------
# Staff & Salaries
# -----------------------------
@app.get("/staff", response_model=List[Staff])
async def list_staff(api: DairyApi = Depends(get_api)):
    return await api.get_staff()


@app.post("/staff", response_model=Staff)
async def add_staff(payload: StaffIn, api: DairyApi = Depends(get_api)):
    try:
        return await api.add_staff(payload)
    except DairyError as e:
        raise http_error(e)


@app.put("/staff/{staff_id}/salary", response_model=Staff)
async def update_salary(staff_id: str, payload: SalaryUpdate, api: DairyApi = Depends(get_api)):
    try:
        return await api.update_staff_salary(staff_id, payload.salary)
    except DairyError as e:
        raise http_error(e)


@app.delete("/staff/{staff_id}", response_model=OperationResult)
async def delete_staff(staff_id: str, api: DairyApi = Depends(get_api)):
    try:
        return await api.delete_staff(staff_id)
    except DairyError as e:
        raise http_error(e)


@app.get("/salaries", response_model=List[SalaryRecord])
async def list_salaries(api: DairyApi = Depends(get_api)):
    return await api.get_salary_records()


@app.post("/salaries", response_model=SalaryRecord)
async def pay_salary(payload: SalaryPaymentIn, api: DairyApi = Depends(get_api)):
    try:
        return await api.pay_salary(payload)
    except DairyError as e:
        raise http_error(e)


# -----------------------------
# Deliveries & Routes
# -----------------------------
@app.get("/deliveries", response_model=List[Delivery])
async def list_deliveries(
    staff_id: Optional[str] = Query(None, description="Only deliveries assigned to this staff member"),
    api: DairyApi = Depends(get_api),
):
    if staff_id:
        return await api.get_deliveries_by_staff(staff_id)
    return await api.get_deliveries()


@app.put("/deliveries/{delivery_id}", response_model=Delivery)
async def update_delivery(delivery_id: str, payload: Delivery, api: DairyApi = Depends(get_api)):
    try:
        return await api.update_delivery(payload.model_copy(update={"id": delivery_id}))
    except DairyError as e:
        raise http_error(e)


@app.get("/routes", response_model=List[DeliveryRoute])
async def list_routes(api: DairyApi = Depends(get_api)):
    return await api.get_delivery_routes()


@app.post("/routes", response_model=DeliveryRoute)
async def create_route(payload: DeliveryRouteIn, api: DairyApi = Depends(get_api)):
    try:
        return await api.create_delivery_route(payload)
    except DairyError as e:
        raise http_error(e)


# -----------------------------
# Invoices & Production
# -----------------------------
@app.get("/invoices", response_model=List[Invoice])
async def list_invoices(api: DairyApi = Depends(get_api)):
    return await api.get_invoices()


@app.post("/invoices/pricing", response_model=PricingResponse)
async def invoice_pricing(payload: PricingRequest, api: DairyApi = Depends(get_api)):
    return await api.preview_invoice(payload)


@app.post("/invoices", response_model=Invoice)
async def create_invoice(payload: InvoiceIn, api: DairyApi = Depends(get_api)):
    try:
        return await api.create_invoice(payload)
    except DairyError as e:
        raise http_error(e)


@app.get("/conversions", response_model=List[ConversionLog])
async def list_conversions(api: DairyApi = Depends(get_api)):
    return await api.get_conversion_logs()


@app.post("/conversions", response_model=ConversionLog)
async def add_conversion(payload: ConversionLogIn, api: DairyApi = Depends(get_api)):
    try:
        return await api.add_conversion_log(payload)
    except DairyError as e:
        raise http_error(e)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
