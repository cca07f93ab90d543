"""
Configuration Management for Lawdesk

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here, so every external dependency
(data file location, firm letterhead, spreadsheet sync) is visible in one
place and validated when first accessed.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FirmSettings(BaseSettings):
    """Letterhead details printed on every generated document."""

    model_config = SettingsConfigDict(
        env_prefix="FIRM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    name: str = Field(
        default="HAIRI MUSTAFA ASSOCIATES",
        description="Firm name as printed on documents"
    )
    tagline: str = Field(
        default="Peguam Syarie & Pesuruhjaya Sumpah",
        description="Line printed under the firm name"
    )
    address: str = Field(
        default="Lot 02, Bangunan Arked Mara, 09100 Baling, Kedah Darul Aman",
        description="Postal address"
    )
    contact: str = Field(
        default="Tel: +60 11 5653 1310 | Emel: hairimustafa.legal@gmail.com",
        description="Phone and email line"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets remote mirror configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to mirror into"
    )

    # Worksheet names within the spreadsheet, one per mirrored record kind
    guaman_sheet_name: str = Field(
        default="Guaman",
        description="Worksheet receiving newly registered clients"
    )
    pjs_sheet_name: str = Field(
        default="PJS",
        description="Worksheet receiving new notarization records"
    )
    documents_sheet_name: str = Field(
        default="Dokumen",
        description="Worksheet receiving generated receipts and invoices"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Spreadsheet sync will fail until it exists."
            )
        return v

    @field_validator('spreadsheet_id')
    @classmethod
    def validate_spreadsheet_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Spreadsheet ID is empty; spreadsheet sync disabled")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Durable store
    data_file: str = Field(
        default="data/lawdesk_state.json",
        description="Path of the JSON file holding the full application state"
    )

    # Timed deferrals (milliseconds)
    close_ledger_delay_ms: int = Field(
        default=300,
        ge=0,
        le=5000,
        description="Delay between a close-ledger request and clearing the selection"
    )
    auto_print_delay_ms: int = Field(
        default=600,
        ge=0,
        le=10000,
        description="Delay before auto-printing a freshly generated document"
    )

    # Presentation
    currency_label: str = Field(
        default="RM",
        description="Currency label shown next to amounts"
    )
    max_logo_size_px: int = Field(
        default=512,
        ge=64,
        le=2048,
        description="Largest side of the stored firm logo after downscaling"
    )
    max_logo_upload_mb: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Maximum accepted logo upload size in MB"
    )

    # Sync
    mirror_documents: bool = Field(
        default=False,
        description="Also mirror generated receipts and invoices to the spreadsheet"
    )
    audit_history_size: int = Field(
        default=200,
        ge=10,
        le=5000,
        description="Number of recent audit events kept in memory"
    )

    @property
    def data_path(self) -> Path:
        return Path(self.data_file)

    @property
    def max_logo_upload_bytes(self) -> int:
        """Get max logo upload size in bytes."""
        return self.max_logo_upload_mb * 1024 * 1024


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily so a missing spreadsheet configuration
    # does not prevent the rest of the app from starting.

    @property
    def firm(self) -> FirmSettings:
        return FirmSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, object]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid} plus `<name>_error`
    entries for the groups that failed. Used by the settings page.
    """
    results: dict[str, object] = {}

    settings = get_settings()

    for name in ("app", "firm", "google_sheets"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
