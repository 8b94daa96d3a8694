"""
Locust scenario user classes.

Each module in this package declares one scenario and the Locust
``HttpUser`` subclass that executes it:

- :mod:`.login`: admin login latency baseline (``login``)
- :mod:`.concurrent_login`: admin login under heavy contention
  (``concurrent-login``)
- :mod:`.order_list`: paged order reads (``order-list``)
- :mod:`.order_stress`: order creation at a constant arrival rate
  (``order-stress``)
- :mod:`.payment_request`: payment requests against seeded orders
  (``payment``)

All concrete scenarios inherit from :class:`~.base.ScenarioUser`, which
handles fixture access, iteration indexing and response classification.
"""

from __future__ import annotations

from tests.performance.scenarios.base import Scenario, ScenarioUser
from tests.performance.scenarios.concurrent_login import CONCURRENT_LOGIN, ConcurrentLoginUser
from tests.performance.scenarios.login import LOGIN, LoginUser
from tests.performance.scenarios.order_list import ORDER_LIST, OrderListUser
from tests.performance.scenarios.order_stress import ORDER_STRESS, OrderStressUser
from tests.performance.scenarios.payment_request import PAYMENT_REQUEST, PaymentRequestUser

# Maps CLI tags to scenario declarations and the user class that runs them.
SCENARIOS: dict[str, Scenario] = {
    scenario.tag: scenario
    for scenario in (LOGIN, CONCURRENT_LOGIN, ORDER_LIST, ORDER_STRESS, PAYMENT_REQUEST)
}
TAG_TO_USER_CLASS: dict[str, type[ScenarioUser]] = {
    LOGIN.tag: LoginUser,
    CONCURRENT_LOGIN.tag: ConcurrentLoginUser,
    ORDER_LIST.tag: OrderListUser,
    ORDER_STRESS.tag: OrderStressUser,
    PAYMENT_REQUEST.tag: PaymentRequestUser,
}
DEFAULT_SCENARIO = LOGIN.tag


def get_scenario(name: str) -> Scenario:
    """
    Look a scenario up by tag (``order-stress``) or settings name (``order_stress``).

    Raises:
        KeyError: If no scenario matches.
    """
    key = name.strip().lower().replace("_", "-")
    if key not in SCENARIOS:
        raise KeyError(f"Unknown scenario {name!r}; choose from {', '.join(SCENARIOS)}")
    return SCENARIOS[key]
