"""
AgroTrade Load Testing with Locust

Run with (after `flask system seed` and one procurement per branch):
    locust -f tests/stress/locustfile.py --host http://127.0.0.1:5000

Or headless:
    locust -f tests/stress/locustfile.py --host http://127.0.0.1:5000 \
           --users 10 --spawn-rate 2 --run-time 60s --headless

Pass thresholds:
- p95 response time < 500ms for reads
- p95 response time < 1000ms for writes
- Error rate < 1% (insufficient stock counts as an expected answer)
"""

import os
import random
import time
from typing import Dict, List, Optional

from locust import HttpUser, between, events, task


# =============================================================================
# CONFIGURATION
# =============================================================================

SEED_PASSWORD = os.environ.get("SEED_PASSWORD", "ChangeMe123")

# Accounts created by `flask system seed`
TEST_USERS = [
    {"email": "manager1@agrotrade.local", "branch": "branch1"},
    {"email": "manager2@agrotrade.local", "branch": "branch2"},
]

DIRECTOR = {"email": "director@agrotrade.local", "branch": "branch1"}

PRODUCE_NAME = os.environ.get("LOAD_PRODUCE_NAME", "Beans")


# =============================================================================
# METRICS TRACKING
# =============================================================================

class MetricsCollector:
    """Collect and report metrics."""

    def __init__(self):
        self.request_counts: Dict[str, int] = {}
        self.error_counts: Dict[str, int] = {}
        self.response_times: Dict[str, List[float]] = {}

    def record(self, name: str, response_time: float, success: bool):
        if name not in self.request_counts:
            self.request_counts[name] = 0
            self.error_counts[name] = 0
            self.response_times[name] = []

        self.request_counts[name] += 1
        if not success:
            self.error_counts[name] += 1
        self.response_times[name].append(response_time)

    def get_summary(self) -> Dict:
        summary = {}
        for name in self.request_counts:
            times = sorted(self.response_times[name])
            count = len(times)
            if count == 0:
                continue

            p95_idx = int(count * 0.95)
            summary[name] = {
                "count": self.request_counts[name],
                "errors": self.error_counts[name],
                "error_rate": self.error_counts[name] / self.request_counts[name] * 100,
                "avg_ms": sum(times) / count,
                "p95_ms": times[p95_idx] if p95_idx < count else times[-1],
            }
        return summary


metrics = MetricsCollector()


# =============================================================================
# USER BEHAVIORS
# =============================================================================

class AgroTradeUser(HttpUser):
    """
    Base user that authenticates on start.
    """
    wait_time = between(0.5, 2)
    abstract = True

    credentials: Optional[Dict] = None
    token: Optional[str] = None
    branch: str = "branch1"

    def on_start(self):
        """Login when user starts."""
        creds = self.credentials or random.choice(TEST_USERS)
        response = self.client.post(
            "/api/auth/login",
            json={"email": creds["email"], "password": SEED_PASSWORD},
            name="auth/login"
        )
        if response.status_code == 200:
            data = response.json()
            self.token = data.get("token")
            self.branch = data.get("branch", creds["branch"])

    def get_headers(self) -> Dict:
        """Get headers with auth token."""
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def timed(self, name: str, method: str, path: str, ok_statuses, **kwargs):
        start = time.time()
        response = self.client.request(method, path, headers=self.get_headers(), name=name, **kwargs)
        metrics.record(name, (time.time() - start) * 1000, response.status_code in ok_statuses)
        return response


class BrowsingUser(AgroTradeUser):
    """
    Manager browsing stock, sales and alerts.
    """
    weight = 3

    @task(5)
    def list_produce(self):
        self.timed("procurement/list", "GET", "/api/procurement", (200,))

    @task(3)
    def list_sales(self):
        self.timed("sales/list", "GET", "/api/sales", (200,))

    @task(2)
    def overdue_alert(self):
        self.timed("credit-sales/overdue", "GET", "/api/credit-sales/alerts/overdue", (200,))

    @task(2)
    def out_of_stock_alert(self):
        self.timed("procurement/out-of-stock", "GET", "/api/procurement/alerts/out-of-stock", (200,))

    @task(1)
    def health_check(self):
        self.timed("system/health", "GET", "/api/health", (200,))


class SalesUser(AgroTradeUser):
    """
    Staff hammering the stock decrement with regular and credit sales.
    """
    weight = 2

    @task(4)
    def record_sale(self):
        self.timed("sales/create", "POST", "/api/sales", (201, 400), json={
            "produceName": PRODUCE_NAME,
            "tonnage": round(random.uniform(0.1, 1.5), 2),
            "amountPaid": random.randint(1000, 10000),
            "buyerName": "Load Buyer",
            "branch": self.branch,
        })

    @task(1)
    def record_credit_sale(self):
        due = time.strftime("%Y-%m-%d", time.gmtime(time.time() + 30 * 86400))
        self.timed("credit-sales/create", "POST", "/api/credit-sales", (201, 400), json={
            "buyerName": "Load Credit Buyer",
            "nin": "CM1234567",
            "location": "Kampala",
            "contact": "0701234567",
            "amountDue": random.randint(1000, 10000),
            "produceName": PRODUCE_NAME,
            "tonnage": round(random.uniform(0.1, 1.0), 2),
            "dueDate": due,
            "branch": self.branch,
        })


class ReportingUser(AgroTradeUser):
    """
    Director pulling reports across both branches.
    """
    weight = 1
    credentials = DIRECTOR

    @task(3)
    def sales_summary(self):
        self.timed("reports/sales-summary", "GET", "/api/reports/sales-summary", (200,))

    @task(2)
    def inventory_report(self):
        self.timed("reports/inventory", "GET", "/api/reports/inventory", (200,))

    @task(1)
    def agent_performance(self):
        self.timed("reports/agent-performance", "GET", "/api/reports/agent-performance", (200,))


# =============================================================================
# EVENT HANDLERS
# =============================================================================

@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Print summary when test stops."""
    print("\n" + "=" * 80)
    print("LOAD TEST SUMMARY")
    print("=" * 80)

    summary = metrics.get_summary()

    print(f"\n{'Endpoint':<30} {'Count':>8} {'Errors':>8} {'Err%':>8} {'Avg(ms)':>10} {'P95(ms)':>10}")
    print("-" * 80)

    total_requests = 0
    total_errors = 0
    all_pass = True

    for name, stats in sorted(summary.items()):
        total_requests += stats["count"]
        total_errors += stats["errors"]

        p95_threshold = 1000 if name.endswith("create") else 500
        passed = stats["p95_ms"] < p95_threshold and stats["error_rate"] < 1

        status = "PASS" if passed else "FAIL"
        if not passed:
            all_pass = False

        print(f"{name:<30} {stats['count']:>8} {stats['errors']:>8} {stats['error_rate']:>7.2f}% {stats['avg_ms']:>9.1f} {stats['p95_ms']:>9.1f} [{status}]")

    print("-" * 80)
    print(f"{'TOTAL':<30} {total_requests:>8} {total_errors:>8} {total_errors/max(total_requests,1)*100:>7.2f}%")
    print("=" * 80)

    if all_pass:
        print("\n[PASS] All endpoints within thresholds")
    else:
        print("\n[FAIL] Some endpoints exceeded thresholds")
        print("  - Reads: P95 < 500ms, Error rate < 1%")
        print("  - Writes: P95 < 1000ms, Error rate < 1%")

    print("=" * 80)
