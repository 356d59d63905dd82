from __future__ import annotations

from dataclasses import dataclass

import gspread
from google.oauth2.service_account import Credentials

from app.frtu.errors import ConfigurationError

SCOPES = ("https://www.googleapis.com/auth/spreadsheets",)
TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class SheetCredentials:
    service_account_email: str
    private_key: str

    @property
    def complete(self) -> bool:
        return bool(self.service_account_email and self.private_key)

    @classmethod
    def from_config(cls, config: dict) -> "SheetCredentials":
        return cls(
            service_account_email=(config.get("GOOGLE_SERVICE_ACCOUNT_EMAIL") or "").strip(),
            private_key=config.get("GOOGLE_PRIVATE_KEY") or "",
        )


def open_spreadsheet(creds: SheetCredentials, sheet_id: str) -> gspread.Spreadsheet:
    """Authenticate as the service account and open the workbook by key."""
    if not creds.complete:
        raise ConfigurationError("Missing Google Credentials")
    credentials = Credentials.from_service_account_info(
        {
            "type": "service_account",
            "client_email": creds.service_account_email,
            "private_key": creds.private_key,
            "token_uri": TOKEN_URI,
        },
        scopes=list(SCOPES),
    )
    return gspread.authorize(credentials).open_by_key(sheet_id)
