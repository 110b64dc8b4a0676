"""
First-run data: the product catalog and a small demo roster.

Only used when the record store has nothing for a collection yet.
"""
import datetime
import random
from typing import List

from schemas import (
    ConversionLog,
    DailyRecord,
    Delivery,
    DeliveryRoute,
    Invoice,
    InvoiceItem,
    Product,
    SalaryRecord,
    Staff,
)

APP_NAME = "YADUKUL DAIRY"

PRODUCTS_LIST = [
    {"id": "cow-milk", "name": "Cow Milk", "unit": "Ltr", "type": "Cow Milk"},
    {"id": "buffalo-milk", "name": "Buffalo Milk", "unit": "Ltr", "type": "Buffalo Milk"},
    {"id": "curd", "name": "Curd (Dahi)", "unit": "Kg", "type": "Dairy Product"},
    {"id": "buttermilk", "name": "Butter Milk (Chaach)", "unit": "Ltr", "type": "Dairy Product"},
    {"id": "buffalo-ghee", "name": "Buffalo Ghee", "unit": "Kg", "type": "Dairy Product"},
    {"id": "cow-ghee", "name": "Cow Ghee", "unit": "Kg", "type": "Dairy Product"},
    {"id": "paneer", "name": "Paneer", "unit": "Kg", "type": "Dairy Product"},
    {"id": "butter", "name": "Butter (Desi Makhan)", "unit": "Kg", "type": "Dairy Product"},
    {"id": "mustard-oil", "name": "Farm Mustard Oil", "unit": "Ltr", "type": "Other"},
    {"id": "mawa", "name": "Mawa", "unit": "Kg", "type": "Dairy Product"},
    {"id": "lassi", "name": "Lassi", "unit": "Ltr", "type": "Dairy Product"},
]


def init_products(rng: random.Random) -> List[Product]:
    products = []
    for p in PRODUCTS_LIST:
        ceiling = 499 if p["unit"] == "Ltr" else 99
        products.append(Product(**p, stock=rng.randint(0, ceiling) + 20))
    return products


def init_staff() -> List[Staff]:
    return [
        Staff(id="S001", name="Ramesh Kumar", role="Delivery", salary=15000, password="password1"),
        Staff(id="S002", name="Sita Devi", role="Counter Sales", salary=12000, password="password2"),
        Staff(id="S003", name="Mohan Singh", role="Production", salary=18000, password="password3"),
        Staff(id="S004", name="Geeta Sharma", role="Manager", salary=25000, password="password4"),
        Staff(id="S005", name="Arjun Reddy", role="Delivery", salary=15500, password="password5"),
    ]


def init_deliveries(staff: List[Staff]) -> List[Delivery]:
    drivers = [s.id for s in staff if s.role == "Delivery"]
    first = drivers[0] if drivers else "S001"
    second = drivers[1] if len(drivers) > 1 else "S005"
    return [
        Delivery(id="D001", customer_name="Anjali Verma", address="123, Green Park, Delhi",
                 status="Delivered", assigned_to=first),
        Delivery(id="D002", customer_name="Raj Malhotra", address="456, Civil Lines, Noida",
                 status="Pending", assigned_to=second),
        Delivery(id="D003", customer_name="Priya Singh", address="789, MG Road, Gurgaon",
                 status="Pending", assigned_to=first),
        Delivery(id="D004", customer_name="Amit Patel", address="101, Sector 15, Faridabad",
                 status="Returned", reason="Customer not available",
                 photo="https://via.placeholder.com/150/FF0000/FFFFFF?text=Door+Closed",
                 assigned_to=second),
    ]


def init_daily_records(today: datetime.date, rng: random.Random, days: int = 365) -> List[DailyRecord]:
    records = []
    for i in range(days, -1, -1):
        counter_sales = rng.randint(0, 4999) + 2000
        delivery_sales = rng.randint(0, 7999) + 4000
        records.append(DailyRecord(
            date=today - datetime.timedelta(days=i),
            total_sales=counter_sales + delivery_sales,
            counter_sales=counter_sales,
            delivery_sales=delivery_sales,
            products_delivered=rng.randint(0, 49) + 20,
            products_pending=rng.randint(0, 9) + 2,
            products_returned=rng.randint(0, 4),
        ))
    return records


def init_invoices(today: datetime.date) -> List[Invoice]:
    return [
        Invoice(id="I001", customer_name="Walk-in", date=today,
                items=[InvoiceItem(product_id="cow-milk", quantity=2, price=50)],
                total=100, submitted_by="S002"),
    ]


def init_conversion_logs(today: datetime.date) -> List[ConversionLog]:
    return [
        ConversionLog(id="C001", date=today, from_product="Cow Milk", from_quantity=50,
                      to_product="Paneer", to_quantity=10, staff_id="S003"),
    ]


def init_delivery_routes() -> List[DeliveryRoute]:
    return [
        DeliveryRoute(id="R001", name="South Delhi Route", staff_id="S001", zone="Green Park, Hauz Khas, Saket"),
        DeliveryRoute(id="R002", name="Gurgaon Route", staff_id="S005", zone="MG Road, Cyber City"),
    ]


def init_salary_records(today: datetime.date) -> List[SalaryRecord]:
    return [
        SalaryRecord(id="SR001", staff_id="S001", amount=15000, payment_date=today,
                     for_month="2024-07"),
    ]
