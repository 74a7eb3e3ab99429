"""
Application-wide constants.
"""

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Request tracing
REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

# Default subscription catalog seeded on first start
DEFAULT_SUBSCRIPTION_PLANS = (
    {
        "name": "Semester",
        "description": "4-month subscription for one semester",
        "duration_months": 4,
        "price_per_month": "250000",
        "total_price": "1000000",
    },
    {
        "name": "Half Year",
        "description": "6-month subscription",
        "duration_months": 6,
        "price_per_month": "240000",
        "total_price": "1440000",
    },
    {
        "name": "Full Year",
        "description": "12-month subscription with the best monthly rate",
        "duration_months": 12,
        "price_per_month": "200000",
        "total_price": "2400000",
    },
)
