"""New Credential ModalScreen for adding a login to the store."""

from __future__ import annotations

from textual import work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label

from gpass.flows.web import WebSyncFlow
from gpass.models import Credential, NewCredential


class NewCredentialScreen(ModalScreen[Credential | None]):
    """Modal form for a new login.

    Submits through the WebSyncFlow and returns the created Credential, or
    None on cancel. A failed submit keeps the form open with the error shown.
    """

    BINDINGS = [
        Binding("escape", "dismiss_screen", "Cancel"),
    ]

    DEFAULT_CSS = """
    NewCredentialScreen {
        align: center middle;
    }
    #nc-container {
        width: 70%;
        max-width: 80;
        height: auto;
        background: $surface;
        border: heavy $primary;
        padding: 1 2;
    }
    #nc-title {
        text-align: center;
        text-style: bold;
        width: 100%;
        color: $text;
    }
    .nc-field {
        margin-bottom: 1;
        height: auto;
    }
    #nc-status {
        width: 100%;
        height: auto;
        margin-top: 1;
    }
    .nc-buttons {
        height: auto;
        align: center middle;
    }
    .nc-buttons Button {
        margin: 0 1;
    }
    """

    def __init__(self, flow: WebSyncFlow) -> None:
        super().__init__()
        self._flow = flow

    def compose(self) -> ComposeResult:
        with Vertical(id="nc-container"):
            yield Label("New Pass", id="nc-title")
            with Vertical(classes="nc-field"):
                yield Label("[bold]URL[/bold]")
                yield Input(placeholder="https://example.com", id="nc-url")
            with Vertical(classes="nc-field"):
                yield Label("[bold]Username[/bold]")
                yield Input(placeholder="Username or email", id="nc-username")
            with Vertical(classes="nc-field"):
                yield Label("[bold]Password[/bold]  [dim](empty = generate)[/dim]")
                yield Input(password=True, id="nc-password")
            yield Label("", id="nc-status")
            with Vertical(classes="nc-buttons"):
                yield Button("Save", variant="primary", id="btn-save")
                yield Button("Cancel", variant="default", id="btn-cancel")

    def on_mount(self) -> None:
        self.query_one("#nc-url", Input).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-save":
            self._submit()
        elif event.button.id == "btn-cancel":
            self.action_dismiss_screen()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def _submit(self) -> None:
        url = self.query_one("#nc-url", Input).value.strip()
        username = self.query_one("#nc-username", Input).value.strip()
        password = self.query_one("#nc-password", Input).value
        if not url or not username:
            self.show_error("URL and username are required.")
            return
        self._save(NewCredential(url=url, username=username, password=password))

    @work(exclusive=True)
    async def _save(self, record: NewCredential) -> None:
        button = self.query_one("#btn-save", Button)
        button.disabled = True
        self.query_one("#nc-status", Label).update("[dim]Saving...[/dim]")
        try:
            created = await self._flow.create(record)
        finally:
            button.disabled = False
        if created is None:
            self.show_error(self._flow.form.error or "Save failed.")
            return
        self.dismiss(created)

    def show_error(self, message: str) -> None:
        self.query_one("#nc-status", Label).update(f"[red]{message}[/red]")

    def action_dismiss_screen(self) -> None:
        self._flow.close_form()
        self.dismiss(None)
