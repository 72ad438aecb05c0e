"""Seed data for development and testing.

The rate set deliberately carries the data-quality problems the pricing engine
has to cope with: a missing Q2 window for the executive office, a meeting room
with no rates at all, an overlapping pair for the Tech Campus private office and
missing H2 rates for the collaboration space.
"""
import json
import logging
import os
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List
from sqlalchemy.orm import Session
from app.backend.db.models import Property, RoomType, Unit, Rate, Booking, RateType, UnitStatus, BookingStatus


logger = logging.getLogger(__name__)


PROPERTIES: List[Dict[str, Any]] = [
    {
        "property_id": "prop_downtown_hub",
        "name": "Downtown Hub",
        "address": "123 Main Street, San Francisco, CA 94105",
        "timezone": "America/Los_Angeles",
    },
    {
        "property_id": "prop_tech_campus",
        "name": "Tech Campus North",
        "address": "456 Innovation Drive, San Jose, CA 95110",
        "timezone": "America/Los_Angeles",
    },
]

ROOM_TYPES: List[Dict[str, Any]] = [
    {
        "room_type_id": "rt_exec_office_dt",
        "property_id": "prop_downtown_hub",
        "name": "Executive Office",
        "description": "Private office with premium amenities, ideal for executives and senior management",
        "capacity": 2,
        "amenities": ["Standing Desk", "Herman Miller Chair", "Whiteboard", "External Monitor", "High-Speed Internet"],
        "pricing_config": {
            "rate_selection_strategy": "duration_based",
            "length_of_stay_discounts": [
                {"min_nights": 7, "discount_pct": 5},
                {"min_nights": 30, "discount_pct": 10},
            ],
        },
    },
    {
        "room_type_id": "rt_hot_desk_dt",
        "property_id": "prop_downtown_hub",
        "name": "Hot Desk",
        "description": "Flexible workspace in open area, first-come first-served",
        "capacity": 1,
        "amenities": ["Desk", "Chair", "Power Outlet", "WiFi"],
        "pricing_config": {"rate_selection_strategy": "duration_based"},
    },
    {
        "room_type_id": "rt_meeting_large_dt",
        "property_id": "prop_downtown_hub",
        "name": "Meeting Room Large",
        "description": "Large conference room with AV equipment",
        "capacity": 12,
        "amenities": ["Conference Table", "65-inch Display", "Video Conferencing", "Whiteboard", "Catering Setup"],
        "pricing_config": None,
    },
    {
        "room_type_id": "rt_private_office_tc",
        "property_id": "prop_tech_campus",
        "name": "Private Office",
        "description": "Standard private office with essential amenities",
        "capacity": 1,
        "amenities": ["Desk", "Ergonomic Chair", "Storage Cabinet", "Window View"],
        "pricing_config": {
            "rate_selection_strategy": "lowest_total",
            "minimum_stay_nights": 7,
        },
    },
    {
        "room_type_id": "rt_collab_space_tc",
        "property_id": "prop_tech_campus",
        "name": "Collaboration Space",
        "description": "Open collaboration area with flexible seating",
        "capacity": 6,
        "amenities": ["Modular Furniture", "Whiteboard Walls", "Standing Tables", "Lounge Seating"],
        "pricing_config": {
            "rate_selection_strategy": "daily",
            "weekend_pricing": {"premium_pct": 20, "days": [5, 6]},
        },
    },
]


def _units(room_type_id: str, prefix: str, numbers: List[tuple]) -> List[Dict[str, Any]]:
    return [
        {
            "unit_id": f"{prefix}_{index:03d}",
            "room_type_id": room_type_id,
            "unit_number": unit_number,
            "floor": floor,
            "status": status,
        }
        for index, (unit_number, floor, status) in enumerate(numbers, start=1)
    ]


UNITS: List[Dict[str, Any]] = (
    _units("rt_exec_office_dt", "unit_dt_exec", [
        ("EO-101", 1, "available"), ("EO-102", 1, "available"), ("EO-201", 2, "occupied"),
    ])
    + _units("rt_hot_desk_dt", "unit_dt_desk", [
        ("HD-A01", 1, "available"), ("HD-A02", 1, "available"), ("HD-A03", 1, "available"),
        ("HD-A04", 1, "available"), ("HD-A05", 1, "available"), ("HD-B01", 2, "available"),
        ("HD-B02", 2, "available"), ("HD-B03", 2, "available"), ("HD-B04", 2, "available"),
        ("HD-B05", 2, "maintenance"),
    ])
    + _units("rt_meeting_large_dt", "unit_dt_meet", [
        ("MR-301", 3, "available"), ("MR-302", 3, "available"),
    ])
    + _units("rt_private_office_tc", "unit_tc_office", [
        ("PO-101", 1, "available"), ("PO-102", 1, "available"), ("PO-103", 1, "occupied"),
        ("PO-104", 1, "available"), ("PO-201", 2, "available"), ("PO-202", 2, "available"),
        ("PO-203", 2, "available"), ("PO-204", 2, "available"), ("PO-301", 3, "available"),
        ("PO-302", 3, "available"),
    ])
    + _units("rt_collab_space_tc", "unit_tc_collab", [
        ("CS-A", 1, "available"), ("CS-B", 2, "available"), ("CS-C", 2, "available"),
        ("CS-D", 3, "available"), ("CS-E", 3, "available"),
    ])
)

RATES: List[Dict[str, Any]] = [
    # Executive Office: no Q2 rates
    {"rate_id": "rate_exec_dt_daily_q1", "room_type_id": "rt_exec_office_dt", "rate_type": "daily",
     "amount": "150.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-03-31"},
    {"rate_id": "rate_exec_dt_daily_h2", "room_type_id": "rt_exec_office_dt", "rate_type": "daily",
     "amount": "175.00", "currency": "USD", "effective_date": "2025-07-01", "end_date": "2025-12-31"},
    {"rate_id": "rate_exec_dt_monthly_q1", "room_type_id": "rt_exec_office_dt", "rate_type": "monthly",
     "amount": "3500.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-03-31"},
    # Hot Desk: complete coverage
    {"rate_id": "rate_desk_dt_hourly_2025", "room_type_id": "rt_hot_desk_dt", "rate_type": "hourly",
     "amount": "15.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-12-31"},
    {"rate_id": "rate_desk_dt_daily_2025", "room_type_id": "rt_hot_desk_dt", "rate_type": "daily",
     "amount": "50.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-12-31"},
    {"rate_id": "rate_desk_dt_monthly_2025", "room_type_id": "rt_hot_desk_dt", "rate_type": "monthly",
     "amount": "800.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-12-31"},
    # Meeting Room Large: no rates
    # Private Office: overlapping daily windows
    {"rate_id": "rate_office_tc_daily_h1", "room_type_id": "rt_private_office_tc", "rate_type": "daily",
     "amount": "120.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-06-30"},
    {"rate_id": "rate_office_tc_daily_overlap", "room_type_id": "rt_private_office_tc", "rate_type": "daily",
     "amount": "125.00", "currency": "USD", "effective_date": "2025-06-15", "end_date": "2025-09-30"},
    {"rate_id": "rate_office_tc_daily_q4", "room_type_id": "rt_private_office_tc", "rate_type": "daily",
     "amount": "130.00", "currency": "USD", "effective_date": "2025-10-01", "end_date": "2025-12-31"},
    {"rate_id": "rate_office_tc_monthly_2025", "room_type_id": "rt_private_office_tc", "rate_type": "monthly",
     "amount": "2800.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-12-31"},
    # Collaboration Space: no H2 rates
    {"rate_id": "rate_collab_tc_hourly_h1", "room_type_id": "rt_collab_space_tc", "rate_type": "hourly",
     "amount": "35.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-06-30"},
    {"rate_id": "rate_collab_tc_daily_h1", "room_type_id": "rt_collab_space_tc", "rate_type": "daily",
     "amount": "200.00", "currency": "USD", "effective_date": "2025-01-01", "end_date": "2025-06-30"},
]

BOOKINGS: List[Dict[str, Any]] = [
    {"booking_id": "book_001", "unit_id": "unit_dt_exec_003", "customer_name": "Acme Corporation",
     "customer_email": "booking@acme.com", "start_date": "2025-01-15", "end_date": "2025-02-14",
     "calculated_price": "3500.00", "currency": "USD", "status": "confirmed",
     "rate_ids": ["rate_exec_dt_monthly_q1"]},
    {"booking_id": "book_002", "unit_id": "unit_tc_office_003", "customer_name": "Jane Smith",
     "customer_email": "jane@example.com", "start_date": "2025-02-01", "end_date": "2025-02-28",
     "calculated_price": "2800.00", "currency": "USD", "status": "confirmed",
     "rate_ids": ["rate_office_tc_monthly_2025"]},
]

# Mock external rate feed consumed by POST /api/rates/sync
EXTERNAL_RATES: List[Dict[str, Any]] = [
    {"room_type_id": "rt_exec_office_dt", "rate_type": "daily", "amount": 160.00, "currency": "USD",
     "effective_date": "2025-04-01", "end_date": "2025-06-30"},
    {"room_type_id": "rt_meeting_large_dt", "rate_type": "hourly", "amount": 75.00, "currency": "USD",
     "effective_date": "2025-01-01", "end_date": "2025-12-31"},
    {"room_type_id": "rt_collab_space_tc", "rate_type": "hourly", "amount": 40.00, "currency": "USD",
     "effective_date": "2025-07-01", "end_date": "2025-12-31"},
]


def seed_database(db: Session) -> bool:
    """
    Insert seed data when the database holds no properties yet.
    
    Args:
        db: Database session
    
    Returns:
        True if seed data was inserted
    """
    if db.query(Property).count() > 0:
        return False
    
    for data in PROPERTIES:
        db.add(Property(**data))
    for data in ROOM_TYPES:
        db.add(RoomType(**data))
    for data in UNITS:
        db.add(Unit(**{**data, "status": UnitStatus(data["status"])}))
    for data in RATES:
        db.add(Rate(
            **{
                **data,
                "rate_type": RateType(data["rate_type"]),
                "amount": Decimal(data["amount"]),
                "effective_date": date.fromisoformat(data["effective_date"]),
                "end_date": date.fromisoformat(data["end_date"]),
            }
        ))
    for data in BOOKINGS:
        db.add(Booking(
            **{
                **data,
                "status": BookingStatus(data["status"]),
                "calculated_price": Decimal(data["calculated_price"]),
                "start_date": date.fromisoformat(data["start_date"]),
                "end_date": date.fromisoformat(data["end_date"]),
            }
        ))
    
    db.commit()
    logger.info(
        "Seeded %d properties, %d room types, %d units, %d rates, %d bookings",
        len(PROPERTIES), len(ROOM_TYPES), len(UNITS), len(RATES), len(BOOKINGS)
    )
    return True


def write_external_rates_feed(path: str, overwrite: bool = False) -> bool:
    """Write the mock external rate feed to ``path`` unless it already exists."""
    if os.path.exists(path) and not overwrite:
        return False
    
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(EXTERNAL_RATES, f, indent=2)
    return True
