"""Pilot tests for the GPass terminal UI."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from textual.widgets import DataTable, Input

from gpass.errors import TransportError
from gpass.tui.app import HIDDEN_PASSWORD, GPassTUI


async def _settle(app, pilot):
    await pilot.pause()
    await app.workers.wait_for_complete()
    await pilot.pause()


def _table(app) -> DataTable:
    return app.query_one("#logins", DataTable)


class TestGPassTUI:
    @pytest.mark.asyncio
    async def test_mount_loads_rows(self, fake_client):
        app = GPassTUI(fake_client)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            assert _table(app).row_count == 3
            assert fake_client.list_calls == 1
            assert app.flow.mounted

    @pytest.mark.asyncio
    async def test_exit_unmounts_and_closes_client(self, fake_client):
        app = GPassTUI(fake_client)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
        assert not app.flow.mounted
        assert fake_client.closed

    @pytest.mark.asyncio
    async def test_search_filters_rows(self, fake_client):
        app = GPassTUI(fake_client)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            app.query_one("#search", Input).value = "example"
            await pilot.pause()
            assert _table(app).row_count == 2
            assert app.flow.table.filter_text == "example"

            app.query_one("#search", Input).value = ""
            await pilot.pause()
            assert _table(app).row_count == 3

    @pytest.mark.asyncio
    async def test_passwords_hidden_until_toggled(self, fake_client):
        app = GPassTUI(fake_client)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            assert _table(app).get_row("1")[2] == HIDDEN_PASSWORD
            await pilot.press("ctrl+p")
            assert _table(app).get_row("1")[2] == "pw"
            await pilot.press("ctrl+p")
            assert _table(app).get_row("1")[2] == HIDDEN_PASSWORD

    @pytest.mark.asyncio
    async def test_cycle_sort(self, fake_client):
        app = GPassTUI(fake_client)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            await pilot.press("ctrl+s")
            assert _table(app).get_row_at(0)[0] == "https://mail.example.com"
            await pilot.press("ctrl+s")
            assert _table(app).get_row_at(0)[0] == "http://Bank.example.org/signin"
            await pilot.press("ctrl+s")
            assert app.flow.table.sort_order is None

    @pytest.mark.asyncio
    async def test_refresh_failure_notifies_and_keeps_rows(self, fake_client):
        app = GPassTUI(fake_client)
        async with app.run_test() as pilot:
            await _settle(app, pilot)
            fake_client.list_error = TransportError("connection refused")
            with patch.object(app, "notify") as notify:
                await pilot.press("ctrl+r")
                await _settle(app, pilot)
            assert fake_client.list_calls == 2
            assert "Refresh failed" in notify.call_args[0][0]
            assert notify.call_args[1]["severity"] == "error"
            assert _table(app).row_count == 3

    @pytest.mark.asyncio
    async def test_initial_load_failure_notifies(self, fake_client):
        fake_client.list_error = TransportError("connection refused")
        app = GPassTUI(fake_client)
        with patch.object(app, "notify") as notify:
            async with app.run_test() as pilot:
                await _settle(app, pilot)
                assert _table(app).row_count == 0
                assert isinstance(app.flow.last_error, TransportError)
        assert "Failed to load logins" in notify.call_args[0][0]
