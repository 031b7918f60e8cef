import logging

from samples import basic_usage, performance_demo, transaction_scenarios


def test_basic_usage_walkthrough(caplog):
    with caplog.at_level(logging.INFO, logger="samples.basic_usage"):
        results = basic_usage.run()

    assert results["reads"] == {
        "active": 4,
        "summaries": 4,
        "expensive": 2,
        "categories": ["Books", "Clothing", "Electronics"],
    }
    assert results["new_product_id"] == 5
    assert str(results["order"]["total"]) == "1399.97"
    assert results["products"] == 5
    assert "Examples completed successfully" in caplog.text


def test_basic_usage_cli(tmp_path):
    url = f"sqlite+pysqlite:///{tmp_path / 'demo.db'}"
    assert basic_usage.main(["--database-url", url, "--log-level", "warning"]) == 0


def test_transaction_scenarios():
    results = transaction_scenarios.run()
    assert results["order_id"] is not None
    # complex order takes 2 laptops; the failed reservation is undone
    assert results["stock_after_rollback"] == 48
    assert results["nested_ok"] is True


def test_performance_demo_reports_every_timing():
    timings = performance_demo.run(rows=50, repeat=1)
    assert set(timings) == {
        "untracked_read",
        "tracked_read",
        "projected_read",
        "per_entity_update",
        "set_based_update",
    }
    assert all(value >= 0 for value in timings.values())
