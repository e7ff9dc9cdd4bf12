"""Concurrent checkouts must never share state or cross-talk in amounts."""

import threading
from concurrent.futures import ThreadPoolExecutor

from ordering.domain import ordering
from ordering.order.placement import checkout


def _run_concurrently(submissions):
    barrier = threading.Barrier(len(submissions))

    def submit(user_id, items):
        with ordering.domain_context():
            barrier.wait(timeout=5)
            order = checkout(user_id, "A1", items)
            return str(order.id), str(order.user_id), order.amount

    with ThreadPoolExecutor(max_workers=len(submissions)) as pool:
        futures = [pool.submit(submit, user_id, items) for user_id, items in submissions]
        return [future.result(timeout=30) for future in futures]


def test_same_user_distinct_carts_produce_distinct_orders(priced_catalog):
    results = _run_concurrently(
        [
            ("user-001", [{"product_id": "P1", "quantity": 2}]),
            ("user-001", [{"product_id": "P2", "quantity": 3}]),
        ]
    )

    (first_id, _, first_amount), (second_id, _, second_amount) = results
    assert first_id != second_id
    assert first_amount == 20.00
    assert second_amount == 15.00


def test_different_users_are_independent(priced_catalog):
    results = _run_concurrently(
        [
            ("user-001", [{"product_id": "P1", "quantity": 1}]),
            ("user-002", [{"product_id": "P2", "quantity": 1}]),
            ("user-003", [{"product_id": "P1", "quantity": 1}, {"product_id": "P2", "quantity": 2}]),
        ]
    )

    assert len({order_id for order_id, _, _ in results}) == 3
    assert [(user_id, amount) for _, user_id, amount in results] == [
        ("user-001", 10.00),
        ("user-002", 5.00),
        ("user-003", 20.00),
    ]
