"""MuStore Load Testing: Locust entry point.

Discovers all user classes from the scenarios package.
Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Overselling check only:
    locust -f loadtests/locustfile.py LastUnitsRaceUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ShopperUser BrowsingUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import os
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.catalogue import BrowsingUser, CatalogueAdminUser  # noqa: F401
from loadtests.scenarios.checkout import LastUnitsRaceUser, ShopperUser, StoreAdminUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print store statistics when the test ends.

    After a race run, reserved stock of the contended product must never exceed
    its stock; the order counts here make that easy to eyeball.
    """
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        resp = requests.get(
            f"{environment.host}/admin/stats",
            headers={"X-Admin-Key": os.getenv("ADMIN_KEY", "admin123")},
            timeout=5,
        )
        stats = resp.json()
        print("[LOADTEST] Store statistics:")
        for key in ("total_orders", "pending_orders", "available_products", "monthly_revenue"):
            print(f"  {key}: {stats.get(key)}")

        contended = LastUnitsRaceUser.contended_product_id
        if contended:
            product = requests.get(f"{environment.host}/products/{contended}", timeout=5).json()
            print(
                f"  contended product: stock={product.get('stock_quantity')} "
                f"available={product.get('available_quantity')}"
            )
        print()
    except (requests.RequestException, ValueError) as e:
        print(f"[LOADTEST] Could not fetch store statistics: {e}\n")
