"""Textual frontend for TinyPM.

Start here with `python -m tinypm.frontend.cli.app` or the `tinypm` script.

The menu is an explicit state machine (:class:`MenuState`): SETUP until a
master password exists, LOCKED until it is verified, BROWSING while the
vault is open, DELETED after the vault was wiped. Record actions are refused
outside BROWSING. Cryptographic failures are only ever shown as
"Invalid password" or "Could not decrypt record".
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from textual import on
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    Checkbox,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Select,
    Static,
)

from tinypm.core.exceptions import (
    AuthenticationFailure,
    ImportFormatError,
    InvalidPasswordError,
    TinyPMError,
)
from tinypm.core.transfer import CsvFormat
from tinypm.frontend.cli.clipboard import copy_secret
from tinypm.frontend.cli.context import AppContext, build_context

logger = logging.getLogger(__name__)

DECRYPT_FAILED = "Could not decrypt record"
INVALID_PASSWORD = "Invalid password"
STORAGE_FAILED = "Vault storage error; details in tinypm.log"


class MenuState(Enum):
    SETUP = "setup"
    LOCKED = "locked"
    BROWSING = "browsing"
    DELETED = "deleted"


def _plural(n: int, word: str = "record") -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


# === Modal definitions ===


class CreateMasterPasswordModal(ModalScreen[Optional[str]]):
    """First-run modal: choose and confirm the master password."""

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static("Create Master Password", classes="title")
            yield Label("No master password found, you must create one before continuing.")
            yield Label("Password")
            self.password_input = Input(placeholder="••••••", password=True, id="password")
            yield self.password_input
            yield Label("Confirm Password")
            self.confirm_input = Input(placeholder="••••••", password=True, id="confirm")
            yield self.confirm_input
            with Horizontal():
                yield Button("Quit", id="cancel")
                yield Button("Create", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.password_input)

    def _submit(self) -> None:
        password = self.password_input.value or ""
        confirm = self.confirm_input.value or ""
        if not password:
            self.app.notify("Password cannot be empty", severity="error")
            return
        if password != confirm:
            self.app.notify("Passwords do not match", severity="error")
            return
        self.dismiss(password)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self._submit()

    @on(Input.Submitted)
    def _on_submitted(self) -> None:
        self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class PasswordModal(ModalScreen[Optional[str]]):
    """Single masked password prompt (unlock, delete-vault confirmation)."""

    def __init__(self, title: str, prompt: str, error: str | None = None):
        super().__init__()
        self.prompt_title = title
        self.prompt = prompt
        self.error = error

    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static(self.prompt_title, classes="title")
            yield Label(self.prompt)
            self.password_input = Input(placeholder="••••••", password=True, id="password")
            yield self.password_input
            yield Static(self.error or "", id="error", classes="error")
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("OK (Enter)", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.password_input)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self.dismiss(self.password_input.value or "")

    @on(Input.Submitted)
    def _on_submitted(self) -> None:
        self.dismiss(self.password_input.value or "")

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class AddRecordResult:
    def __init__(self, name: str, username: str, website: str | None, password: str | None, generate: bool):
        self.name = name
        self.username = username
        self.website = website
        self.password = password
        self.generate = generate


class AddRecordModal(ModalScreen[Optional[AddRecordResult]]):
    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static("Add Record", classes="title")
            self.name_input = Input(placeholder="name", id="name")
            yield self.name_input
            self.username_input = Input(placeholder="username", id="username")
            yield self.username_input
            self.website_input = Input(placeholder="website (optional)", id="website")
            yield self.website_input
            self.generate_box = Checkbox("Auto-generate password", id="generate")
            yield self.generate_box
            self.password_input = Input(placeholder="password", password=True, id="password")
            yield self.password_input
            self.confirm_input = Input(placeholder="confirm password", password=True, id="confirm")
            yield self.confirm_input
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("Add", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.name_input)

    def _submit(self) -> None:
        name = self.name_input.value.strip()
        username = self.username_input.value.strip()
        if not name or not username:
            self.app.notify("Name and username must not be empty", severity="error")
            return
        generate = self.generate_box.value
        password = None
        if not generate:
            password = self.password_input.value
            if not password:
                self.app.notify("Password must not be empty", severity="error")
                return
            if password != self.confirm_input.value:
                self.app.notify("Passwords do not match", severity="error")
                return
        self.dismiss(
            AddRecordResult(
                name=name,
                username=username,
                website=self.website_input.value.strip() or None,
                password=password,
                generate=generate,
            )
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class ImportResult:
    def __init__(self, path: str, fmt: CsvFormat):
        self.path = path
        self.fmt = fmt


class ImportModal(ModalScreen[Optional[ImportResult]]):
    def compose(self) -> ComposeResult:  # pragma: no cover - UI only
        with Vertical(classes="dialog"):
            yield Static("Import Records", classes="title")
            yield Label("CSV file format")
            self.format_select = Select(
                [(fmt.label, fmt) for fmt in CsvFormat],
                value=CsvFormat.STANDARD,
                allow_blank=False,
                id="format",
            )
            yield self.format_select
            yield Label("Path of the CSV file")
            self.path_input = Input(placeholder="~/passwords.csv", id="path")
            yield self.path_input
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button("Import", id="ok", variant="primary")

    def on_mount(self) -> None:  # pragma: no cover
        self.set_focus(self.path_input)

    def _submit(self) -> None:
        path = self.path_input.value.strip()
        if not path:
            self.app.notify("Enter the path of a CSV file", severity="error")
            return
        self.dismiss(ImportResult(path=path, fmt=self.format_select.value))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        else:
            self._submit()

    @on(Input.Submitted)
    def _on_submitted(self) -> None:
        self._submit()

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(None)


class ConfirmModal(ModalScreen[Optional[bool]]):
    def __init__(self, prompt: str, action_label: str = "Confirm"):
        super().__init__()
        self.prompt = prompt
        self.action_label = action_label

    def compose(self) -> ComposeResult:  # pragma: no cover
        with Vertical(classes="dialog"):
            yield Static(self.prompt)
            with Horizontal():
                yield Button("Cancel (Esc)", id="cancel")
                yield Button(f"{self.action_label} (Enter)", id="ok", variant="error")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "ok")

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key == "escape":
            self.dismiss(False)
        elif event.key == "enter":
            self.dismiss(True)


class AlertModal(ModalScreen[None]):
    """Simple alert modal with a title, message, and OK button."""

    def __init__(self, title: str, message: str):
        super().__init__()
        self.alert_title = title
        self.alert_message = message

    def compose(self) -> ComposeResult:  # pragma: no cover
        with Vertical(classes="dialog"):
            yield Static(self.alert_title, classes="title")
            yield Static("")
            yield Static(self.alert_message, id="message")
            yield Static("")
            with Horizontal():
                yield Button("OK", id="ok", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:  # pragma: no cover
        self.dismiss(None)

    def on_key(self, event) -> None:  # pragma: no cover
        if event.key in ("escape", "enter"):
            self.dismiss(None)


# === Application ===


class TinyPMApp(App):
    """Records table with search, driven by an explicit menu state."""

    TITLE = "TPM: Tiny Password Manager"

    CSS = """
    #main { border: heavy $surface; }
    .title { padding: 1 1; text-style: bold; }
    .error { color: $error; height: 1; }
    #status { padding: 0 1 1 1; height: 3; color: $text-muted; }
    ModalScreen { align: center middle; background: rgba(0,0,0,0.45); }
    .dialog { width: 75%; height: auto; max-height: 90%; padding: 1; border: heavy $surface; background: $boost; }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("/", "search", "Search"),
        ("a", "add_record", "Add"),
        ("v", "reveal", "Reveal"),
        ("c", "copy_password", "Copy"),
        ("d", "delete_record", "Delete"),
        ("i", "import_records", "Import"),
        ("e", "export_records", "Export"),
        ("x", "delete_vault", "Delete Vault"),
    ]

    def __init__(self, ctx: AppContext | None = None):
        super().__init__()
        self.ctx = ctx or build_context()

        self.table: DataTable | None = None
        self.search_input: Input | None = None
        self.status: Static | None = None
        self.row_keys: list[int] = []
        self.menu_state = MenuState.SETUP if self.ctx.first_run else MenuState.LOCKED

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with Vertical(id="main"):
            self.search_input = Input(placeholder="Search by name or website (/)", id="search")
            yield self.search_input
            self.table = DataTable(id="records", cursor_type="row")
            yield self.table
            self.status = Static("", id="status")
            yield self.status
        yield Footer()

    def on_mount(self) -> None:
        assert self.table is not None
        self.table.add_columns("Name", "Username", "Website", "Created")
        self.set_focus(self.table)
        if self.menu_state is MenuState.SETUP:
            self.push_screen(CreateMasterPasswordModal(), self._handle_create_master)
        else:
            self._prompt_unlock()

    # === State transitions ===

    def _handle_create_master(self, password: str | None) -> None:
        if password is None:
            self.exit()
            return
        try:
            self.ctx.vault.create_master_password(password, password)
        except (TinyPMError, ValueError, OSError) as exc:
            logger.error("master password creation failed: %s", exc)
            self.push_screen(AlertModal("Setup Failed", STORAGE_FAILED), lambda _: self.exit())
            return
        self.ctx.first_run = False
        self.menu_state = MenuState.LOCKED
        self.notify("Master password successfully created.")
        self._prompt_unlock()

    def _prompt_unlock(self, error: str | None = None) -> None:
        self._set_status("Vault locked")
        self.push_screen(
            PasswordModal("Unlock Vault", "Enter your master password:", error=error),
            self._handle_unlock,
        )

    def _handle_unlock(self, password: str | None) -> None:
        if password is None:
            self.exit()
            return
        try:
            count = self.ctx.vault.unlock(password)
        except InvalidPasswordError:
            self._prompt_unlock(error=INVALID_PASSWORD)
            return
        except TinyPMError as exc:
            logger.error("unlock failed: %s", exc)
            self._prompt_unlock(error=STORAGE_FAILED)
            return
        self.menu_state = MenuState.BROWSING
        self.refresh_records()
        self._set_status(f"Vault unlocked ({_plural(count)})")

    def _require_browsing(self) -> bool:
        if self.menu_state is not MenuState.BROWSING:
            self._set_status("Unlock the vault first")
            return False
        return True

    # === Table ===

    def refresh_records(self, term: str | None = None) -> None:
        assert self.table is not None
        self.table.clear(columns=False)
        self.row_keys = []
        if self.menu_state is not MenuState.BROWSING:
            return
        if term is None and self.search_input is not None:
            term = self.search_input.value
        try:
            records = self.ctx.vault.search(term or "")
        except TinyPMError as exc:
            logger.error("loading records failed: %s", exc)
            self._set_status(STORAGE_FAILED)
            return

        for r in records:
            created = r.to_dict()["created_at"] or ""
            self.table.add_row(r.name, r.username, r.website or "--", str(created), key=str(r.id))
            self.row_keys.append(r.id)

    def _set_status(self, message: str) -> None:
        if self.status:
            self.status.update(message)

    def _selected_record_id(self) -> Optional[int]:
        if not self.table or self.table.cursor_row is None:
            return None
        idx = self.table.cursor_row
        if 0 <= idx < len(self.row_keys):
            return self.row_keys[idx]
        return None

    def _selected_name(self) -> str:
        if not self.table or self.table.cursor_row is None:
            return ""
        return str(self.table.get_row_at(self.table.cursor_row)[0])

    @on(Input.Changed, "#search")
    def on_search_changed(self, event: Input.Changed) -> None:
        if self.menu_state is MenuState.BROWSING:
            self.refresh_records(event.value)

    @on(Input.Submitted, "#search")
    def on_search_submitted(self) -> None:
        if self.table is not None:
            self.set_focus(self.table)

    @on(DataTable.RowSelected, "#records")
    def on_row_selected(self) -> None:
        self.action_reveal()

    # === Actions ===

    def action_refresh(self) -> None:
        if self._require_browsing():
            self.refresh_records()

    def action_search(self) -> None:
        if self._require_browsing() and self.search_input is not None:
            self.set_focus(self.search_input)

    def _reveal_selected(self) -> Optional[str]:
        record_id = self._selected_record_id()
        if record_id is None:
            self._set_status("Select a record first")
            return None
        try:
            return self.ctx.vault.reveal(record_id)
        except AuthenticationFailure:
            self._set_status(DECRYPT_FAILED)
            return None
        except TinyPMError as exc:
            logger.error("reveal failed: %s", exc)
            self._set_status(STORAGE_FAILED)
            return None

    def action_reveal(self) -> None:
        if not self._require_browsing():
            return
        secret = self._reveal_selected()
        if secret is not None:
            self.push_screen(AlertModal(f"Password for {self._selected_name()}", secret))

    def action_copy_password(self) -> None:
        if not self._require_browsing():
            return
        secret = self._reveal_selected()
        if secret is None:
            return
        if copy_secret(secret):
            self._set_status(f"Password for {self._selected_name()} copied to clipboard")
        else:
            self._set_status("Clipboard unavailable; use reveal (v) instead")

    def action_add_record(self) -> None:
        if self._require_browsing():
            self.push_screen(AddRecordModal(), self._handle_add_record)

    def _handle_add_record(self, result: Optional[AddRecordResult]) -> None:
        if not result:
            return
        password = result.password
        if result.generate:
            password = self.ctx.vault.generate_password()
        try:
            self.ctx.vault.add_record(result.name, result.username, password, website=result.website)
        except ValueError as exc:
            self._set_status(f"Add failed: {exc}")
            return
        except TinyPMError as exc:
            logger.error("add failed: %s", exc)
            self._set_status(STORAGE_FAILED)
            return
        self.refresh_records()
        if result.generate:
            self.push_screen(AlertModal("Password added!", f"Generated: {password}"))
        self._set_status("Password added!")

    def action_delete_record(self) -> None:
        if not self._require_browsing():
            return
        record_id = self._selected_record_id()
        if record_id is None:
            self._set_status("Select a record first")
            return
        prompt = f"Are you sure you want to delete '{self._selected_name()}'?"
        self.push_screen(
            ConfirmModal(prompt, "Delete"),
            lambda ok: self._handle_delete_record(ok, record_id),
        )

    def _handle_delete_record(self, confirmed: Optional[bool], record_id: int) -> None:
        if not confirmed:
            return
        try:
            self.ctx.vault.delete_record(record_id)
        except TinyPMError as exc:
            logger.error("record deletion failed: %s", exc)
            self._set_status(STORAGE_FAILED)
            return
        self.refresh_records()
        self._set_status("Record deleted")

    def action_import_records(self) -> None:
        if self._require_browsing():
            self.push_screen(ImportModal(), self._handle_import)

    def _handle_import(self, result: Optional[ImportResult]) -> None:
        if not result:
            return
        try:
            count = self.ctx.vault.import_csv(result.path, result.fmt)
        except ImportFormatError as exc:
            self._set_status(f"Import failed: {exc}")
            return
        except OSError as exc:
            logger.warning("import failed: %s", exc)
            self._set_status("Import failed: could not read file")
            return
        except TinyPMError as exc:
            logger.error("import failed: %s", exc)
            self._set_status(STORAGE_FAILED)
            return
        self.refresh_records()
        self._set_status(f"{_plural(count)} imported!")

    def action_export_records(self) -> None:
        if not self._require_browsing():
            return
        try:
            count = len(self.ctx.vault.records())
        except TinyPMError as exc:
            logger.error("loading records failed: %s", exc)
            self._set_status(STORAGE_FAILED)
            return
        self.push_screen(
            ConfirmModal(f"Are you sure you want to export {_plural(count)}?", "Export"),
            self._handle_export,
        )

    def _handle_export(self, confirmed: Optional[bool]) -> None:
        if not confirmed:
            return
        try:
            path = self.ctx.vault.export_csv()
        except AuthenticationFailure:
            self._set_status(DECRYPT_FAILED)
            return
        except (TinyPMError, OSError) as exc:
            logger.error("export failed: %s", exc)
            self._set_status(STORAGE_FAILED)
            return
        self._set_status(f"Records exported {path}")

    def action_delete_vault(self) -> None:
        if not self._require_browsing():
            return
        prompt = (
            "Are you sure you want to delete your vault? This action is irreversible "
            "and will require you to enter your master password. Once deleted, you will "
            "be required to set a new master password upon relaunch."
        )
        self.push_screen(ConfirmModal(prompt, "Delete vault"), self._handle_delete_vault_confirm)

    def _handle_delete_vault_confirm(self, confirmed: Optional[bool]) -> None:
        if confirmed:
            self.push_screen(
                PasswordModal("Delete Vault", "Enter your master password to confirm:"),
                self._handle_delete_vault,
            )

    def _handle_delete_vault(self, password: str | None) -> None:
        if password is None:
            return
        try:
            self.ctx.vault.delete_vault(password)
        except InvalidPasswordError:
            self._set_status(INVALID_PASSWORD)
            return
        except (TinyPMError, OSError) as exc:
            logger.error("vault deletion failed: %s", exc)
            self._set_status(STORAGE_FAILED)
            return
        self.menu_state = MenuState.DELETED
        self.row_keys = []
        if self.table is not None:
            self.table.clear(columns=False)
        self._set_status("Vault deleted")
        self.push_screen(
            AlertModal("Vault deleted", "Relaunch to create a new master password."),
            lambda _: self.exit(),
        )

    def action_quit(self) -> None:
        """Lock the session and close the database before leaving."""
        if self.menu_state is MenuState.BROWSING:
            self.ctx.vault.lock()
        self.ctx.vault.close()
        self.exit()


def main() -> None:  # pragma: no cover
    TinyPMApp().run()


if __name__ == "__main__":  # pragma: no cover
    main()
