"""End-to-end tests of the order commands through click's test runner."""

import json
import logging

import pytest
import structlog
from click.testing import CliRunner

from icompras.infrastructure.cli.main import cli


@pytest.fixture(params=["sql", "json"])
def runner(request, tmp_path, monkeypatch):
    monkeypatch.setenv("ICOMPRAS_STORAGE", request.param)
    monkeypatch.setenv("ICOMPRAS_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("ICOMPRAS_DATABASE_URL", raising=False)
    yield CliRunner()
    structlog.reset_defaults()
    logging.basicConfig(force=True, handlers=[logging.NullHandler()])


def _payload(tmp_path, name: str, body: dict) -> str:
    path = tmp_path / name
    path.write_text(json.dumps(body))
    return str(path)


NEW_ORDER = {
    "customer_id": 100,
    "status": "DELIVERED",
    "items": [
        {"product_id": 10, "quantity": 2, "unit_price": "50.00"},
        {"product_id": 20, "quantity": 1, "unit_price": "50.00"},
    ],
}

REPLACEMENT = {
    "customer_id": 100,
    "status": "PAID",
    "total": "90.00",
    "tracking_code": "BR999",
    "items": [{"product_id": 30, "quantity": 3, "unit_price": "30.00"}],
}


class TestOrderLifecycle:

    def test_create_update_status_delete(self, runner, tmp_path):
        created = runner.invoke(
            cli, ["order", "create", "--payload", _payload(tmp_path, "new.json", NEW_ORDER)]
        )
        assert created.exit_code == 0, created.output
        assert "Order #1 created" in created.output
        assert "status=PLACED" in created.output
        assert "150.00" in created.output

        updated = runner.invoke(
            cli,
            ["order", "update", "--id", "1", "--payload",
             _payload(tmp_path, "replacement.json", REPLACEMENT)],
        )
        assert updated.exit_code == 0, updated.output
        assert "status=PAID" in updated.output
        assert "Tracking: BR999" in updated.output

        shown = runner.invoke(cli, ["order", "show", "--id", "1"])
        assert shown.exit_code == 0, shown.output
        assert "90.00" in shown.output
        assert "BR999" in shown.output

        status = runner.invoke(cli, ["order", "status", "--id", "1", "--status", "shipped"])
        assert status.exit_code == 0, status.output
        assert "Order #1 is now SHIPPED." in status.output

        listed = runner.invoke(cli, ["order", "list", "--status", "SHIPPED"])
        assert listed.exit_code == 0, listed.output
        assert "SHIPPED" in listed.output

        deleted = runner.invoke(cli, ["order", "delete", "--id", "1"])
        assert deleted.exit_code == 0, deleted.output
        assert "Order #1 deleted." in deleted.output

        empty = runner.invoke(cli, ["order", "list"])
        assert "No orders found." in empty.output

    def test_payload_from_stdin(self, runner):
        result = runner.invoke(
            cli, ["order", "create", "--payload", "-"], input=json.dumps(NEW_ORDER)
        )
        assert result.exit_code == 0, result.output
        assert "Order #1 created" in result.output


class TestErrors:

    @pytest.mark.parametrize("args", [
        ["order", "show", "--id", "7"],
        ["order", "delete", "--id", "7"],
        ["order", "status", "--id", "7", "--status", "PAID"],
    ])
    def test_not_found(self, runner, args):
        result = runner.invoke(cli, args)
        assert result.exit_code == 1
        assert "Not found: Order #7 not found" in result.output

    def test_update_missing_order(self, runner, tmp_path):
        result = runner.invoke(
            cli,
            ["order", "update", "--id", "7", "--payload",
             _payload(tmp_path, "replacement.json", REPLACEMENT)],
        )
        assert result.exit_code == 1
        assert "Not found" in result.output

    def test_invalid_payload_is_a_usage_error(self, runner, tmp_path):
        bad = {**NEW_ORDER, "items": []}
        result = runner.invoke(
            cli, ["order", "create", "--payload", _payload(tmp_path, "bad.json", bad)]
        )
        assert result.exit_code == 2
        assert "items" in result.output

    def test_unknown_status_choice(self, runner):
        result = runner.invoke(cli, ["order", "status", "--id", "1", "--status", "LOST"])
        assert result.exit_code == 2

    def test_sub_cent_price_is_rejected_before_storing(self, runner, tmp_path):
        bad = {**NEW_ORDER, "items": [{"product_id": 10, "quantity": 1, "unit_price": "0.125"}]}
        result = runner.invoke(
            cli, ["order", "create", "--payload", _payload(tmp_path, "bad.json", bad)]
        )
        assert result.exit_code == 2
        assert "unit_price" in result.output

        listed = runner.invoke(cli, ["order", "list"])
        assert "No orders found." in listed.output

    def test_payload_that_is_not_utf8_is_a_usage_error(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_bytes(b'{"customer_id": 100, "note": "\xff\xfe", "items": []}')
        result = runner.invoke(cli, ["order", "create", "--payload", str(path)])
        assert result.exit_code == 2
        assert "not valid UTF-8" in result.output
