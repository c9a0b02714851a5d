import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.css.query import NoMatches
from textual.widgets import DataTable, Footer, Input, Label

from gpass.cache import CredentialCache
from gpass.client import CredentialClient
from gpass.errors import GPassError
from gpass.flows.web import SortOrder, WebSyncFlow
from gpass.models import Credential

logger = logging.getLogger(__name__)

HIDDEN_PASSWORD = "••••••••"


class StatusBar(Container):
    """Live status bar showing load state, row counts and the last error."""

    DEFAULT_CSS = """
    StatusBar {
        dock: top;
        height: 1;
        background: $panel;
        color: $text;
        padding: 0 1;
    }
    StatusBar > Label {
        width: 100%;
    }
    """

    def __init__(self, base_url: str = ""):
        super().__init__()
        self._base_url = base_url
        self._loading = False
        self._shown = 0
        self._total = 0
        self._error = ""

    def compose(self) -> ComposeResult:
        yield Label(id="status-content")

    def on_mount(self) -> None:
        self._refresh()

    def _refresh(self) -> None:
        parts: list[str] = ["[bold]GPass[/bold]"]
        if self._base_url:
            parts.append(f"[dim]{self._base_url}[/dim]")

        if self._loading:
            parts.append("[bold green]● loading[/bold green]")
        elif self._error:
            parts.append(f"[bold red]✗ {self._error[:60]}[/bold red]")
        else:
            parts.append("[dim]○ idle[/dim]")

        if self._shown == self._total:
            parts.append(f"{self._total} logins")
        else:
            parts.append(f"{self._shown}/{self._total} logins")

        try:
            label = self.query_one("#status-content", Label)
        except NoMatches:
            return
        label.update(" │ ".join(parts))

    def update_state(self, *, loading: bool, shown: int, total: int, error: str = "") -> None:
        self._loading = loading
        self._shown = shown
        self._total = total
        self._error = error
        self._refresh()


class GPassTUI(App):
    TITLE = "GPass"
    # ctrl+p toggles passwords
    ENABLE_COMMAND_PALETTE = False
    CSS = """
    Screen {
        layout: vertical;
        background: $surface;
    }

    #search {
        margin: 1 1 0 1;
    }

    #logins {
        height: 1fr;
        margin: 1;
    }

    Footer {
        background: $panel;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+r", "refresh", "Refresh", show=True, priority=True),
        Binding("ctrl+n", "new_login", "New Pass", show=True, priority=True),
        Binding("ctrl+s", "cycle_sort", "Sort URL", show=True, priority=True),
        Binding("ctrl+p", "toggle_passwords", "Show/Hide", show=True, priority=True),
    ]

    def __init__(self, client: CredentialClient, cache: CredentialCache | None = None):
        super().__init__()
        self._client = client
        self._cache = cache or CredentialCache(client)
        self.flow = WebSyncFlow(client, self._cache, on_change=self._on_flow_change)
        self.status_bar = StatusBar(base_url=client.config.base_url)
        self._reveal = False

    def compose(self) -> ComposeResult:
        yield self.status_bar
        yield Input(placeholder="Search", id="search")
        yield DataTable(id="logins", zebra_stripes=True, cursor_type="row")
        yield Footer()

    async def on_mount(self) -> None:
        """Called when app starts."""
        table = self.query_one("#logins", DataTable)
        table.add_column("Url", key="url")
        table.add_column("Username", key="username")
        table.add_column("Password", key="password")
        self._do_mount_flow()

    async def on_unmount(self) -> None:
        self.flow.unmount()
        await self._client.aclose()

    @work(exclusive=True, group="sync")
    async def _do_mount_flow(self) -> None:
        await self.flow.mount()
        if self.flow.last_error is not None:
            self.notify(f"Failed to load logins: {self.flow.last_error}", severity="error")

    # -- Rendering --

    def _on_flow_change(self, flow: WebSyncFlow) -> None:
        if not self.is_running:
            return
        self._render_rows(flow.rows)
        self.status_bar.update_state(
            loading=flow.loading,
            shown=len(flow.rows),
            total=len(self._cache.read()),
            error=str(flow.last_error) if flow.last_error else "",
        )

    def _render_rows(self, rows: tuple[Credential, ...]) -> None:
        table = self.query_one("#logins", DataTable)
        table.clear()
        for credential in rows:
            password = credential.reveal() if self._reveal else HIDDEN_PASSWORD
            table.add_row(
                credential.url,
                credential.username,
                password,
                key=str(credential.id),
            )

    # -- Events and actions --

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search":
            self.flow.set_filter(event.value)

    def action_refresh(self) -> None:
        self._do_refresh()

    @work(exclusive=True, group="sync")
    async def _do_refresh(self) -> None:
        self.status_bar.update_state(
            loading=True,
            shown=len(self.flow.rows),
            total=len(self._cache.read()),
        )
        try:
            await self.flow.refresh()
        except GPassError as e:
            logger.warning("Refresh failed: %s", e)
            self.notify(f"Refresh failed: {e}", severity="error", timeout=10)
            self._on_flow_change(self.flow)

    def action_new_login(self) -> None:
        from gpass.tui.screens.new_credential import NewCredentialScreen

        def _on_result(created: Credential | None) -> None:
            if created is not None:
                self.notify(f"Saved login for {created.url}", severity="information", timeout=3)

        self.flow.open_form()
        self.push_screen(NewCredentialScreen(self.flow), callback=_on_result)

    def action_cycle_sort(self) -> None:
        order = self.flow.table.sort_order
        if order is None:
            self.flow.set_sort(SortOrder.DESCEND)
        elif order is SortOrder.DESCEND:
            self.flow.set_sort(SortOrder.ASCEND)
        else:
            self.flow.set_sort(None)

    def action_toggle_passwords(self) -> None:
        self._reveal = not self._reveal
        self._render_rows(self.flow.rows)
