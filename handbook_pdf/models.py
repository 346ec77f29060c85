"""Pydantic models shared across the rendering pipeline and its adapters."""

import os
import uuid
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from handbook_pdf.exceptions import ConfigurationError

# Resource types Playwright reports through ``Request.resource_type``
RESOURCE_TYPES = frozenset(
    {
        "document",
        "stylesheet",
        "image",
        "media",
        "font",
        "script",
        "texttrack",
        "xhr",
        "fetch",
        "eventsource",
        "websocket",
        "manifest",
        "other",
    }
)

# A4 at 96 dpi
DEFAULT_PAGE_WIDTH_PX = 794
DEFAULT_PAGE_HEIGHT_PX = 1123


class ReadinessStrategy(str, Enum):
    """How the pipeline decides a loaded page is stable enough to capture."""

    NETWORK_IDLE = "network-idle"
    ASSET_COMPLETE = "asset-complete"


class PageDimensions(BaseModel):
    """Fixed size of every captured PDF page, in CSS pixels."""

    model_config = ConfigDict(frozen=True)

    width_px: int = Field(default=DEFAULT_PAGE_WIDTH_PX, gt=0)
    height_px: int = Field(default=DEFAULT_PAGE_HEIGHT_PX, gt=0)

    @property
    def width(self) -> str:
        return f"{self.width_px}px"

    @property
    def height(self) -> str:
        return f"{self.height_px}px"


class RenderOptions(BaseModel):
    """Tunables for one pipeline run.

    Every deployment variant (wait strategy, resource blocking, user agent)
    is expressed here instead of in separate code paths.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    readiness_strategy: ReadinessStrategy = ReadinessStrategy.ASSET_COMPLETE
    navigation_timeout_ms: int = Field(default=90_000, gt=0)
    readiness_retries: int = Field(default=2, ge=0)
    asset_poll_interval_ms: int = Field(default=250, gt=0)
    section_settle_delay_ms: int = Field(default=250, ge=0)
    capture_timeout_ms: int = Field(default=60_000, gt=0)
    blocked_resource_types: FrozenSet[str] = Field(default_factory=frozenset)

    container_selector: str = "#handbook-pages"
    item_selector: str = ".type-handbook-page"
    page: PageDimensions = Field(default_factory=PageDimensions)

    headless: bool = True
    launch_args: List[str] = Field(
        default_factory=lambda: ["--no-sandbox", "--disable-setuid-sandbox"]
    )
    executable_path: Optional[str] = None
    user_agent: Optional[str] = None
    emulate_media: Optional[str] = "screen"

    diagnostics_enabled: bool = True
    diagnostic_timeout_ms: int = Field(default=5_000, gt=0)
    diagnose_sections: bool = False
    keep_diagnostics_on_success: bool = False

    @field_validator("blocked_resource_types", mode="before")
    @classmethod
    def _normalize_resource_types(cls, value: Any) -> FrozenSet[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = value.split(",")
        normalized = frozenset(str(item).strip().lower() for item in value if str(item).strip())
        unknown = normalized - RESOURCE_TYPES
        if unknown:
            raise ValueError(
                f"Unknown resource type(s): {', '.join(sorted(unknown))}. "
                f"Expected any of: {', '.join(sorted(RESOURCE_TYPES))}"
            )
        if "document" in normalized:
            raise ValueError("Blocking 'document' requests would prevent navigation")
        return normalized

    @field_validator("emulate_media")
    @classmethod
    def _check_media(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in ("screen", "print"):
            raise ValueError("emulate_media must be 'screen', 'print' or None")
        return value

    @property
    def navigation_timeout_s(self) -> float:
        return self.navigation_timeout_ms / 1000

    @classmethod
    def from_env(cls, **overrides: Any) -> "RenderOptions":
        """Build options from HANDBOOK_PDF_* environment variables.

        Keyword overrides win over the environment.

        Raises:
            ConfigurationError: If an environment value cannot be parsed
        """
        env = os.environ
        values: Dict[str, Any] = {}
        int_vars = {
            "HANDBOOK_PDF_NAVIGATION_TIMEOUT_MS": "navigation_timeout_ms",
            "HANDBOOK_PDF_READINESS_RETRIES": "readiness_retries",
            "HANDBOOK_PDF_SETTLE_DELAY_MS": "section_settle_delay_ms",
            "HANDBOOK_PDF_CAPTURE_TIMEOUT_MS": "capture_timeout_ms",
            "HANDBOOK_PDF_DIAGNOSTIC_TIMEOUT_MS": "diagnostic_timeout_ms",
        }
        for var, field in int_vars.items():
            raw = env.get(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[field] = int(raw)
            except ValueError:
                raise ConfigurationError(
                    f"{var} must be an integer, got '{raw}'", details={"variable": var}
                )

        if env.get("HANDBOOK_PDF_READINESS_STRATEGY"):
            values["readiness_strategy"] = env["HANDBOOK_PDF_READINESS_STRATEGY"].strip()
        if env.get("HANDBOOK_PDF_BLOCKED_RESOURCES"):
            values["blocked_resource_types"] = env["HANDBOOK_PDF_BLOCKED_RESOURCES"]
        if env.get("HANDBOOK_PDF_CHROMIUM_PATH"):
            values["executable_path"] = env["HANDBOOK_PDF_CHROMIUM_PATH"]
        if env.get("HANDBOOK_PDF_USER_AGENT"):
            values["user_agent"] = env["HANDBOOK_PDF_USER_AGENT"]
        if env.get("HANDBOOK_PDF_CONTAINER_SELECTOR"):
            values["container_selector"] = env["HANDBOOK_PDF_CONTAINER_SELECTOR"]
        if env.get("HANDBOOK_PDF_ITEM_SELECTOR"):
            values["item_selector"] = env["HANDBOOK_PDF_ITEM_SELECTOR"]
        if env.get("HANDBOOK_PDF_KEEP_DIAGNOSTICS", "").lower() in ("1", "true", "yes"):
            values["keep_diagnostics_on_success"] = True

        values.update(overrides)
        try:
            return cls(**values)
        except ValueError as e:
            raise ConfigurationError(f"Invalid render options: {e}")


class GenerationRequest(BaseModel):
    """One call to generate a handbook PDF."""

    model_config = ConfigDict(frozen=True)

    source_url: str
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)


class OutputArtifact(BaseModel):
    """A persisted merged PDF."""

    model_config = ConfigDict(frozen=True)

    filename: str
    filepath: str


class HandbookLinkOutput(BaseModel):
    """Response body of the print endpoint."""

    url: str


class ErrorResponse(BaseModel):
    """Error response structure."""

    model_config = ConfigDict(extra="ignore")

    error_code: str
    message: str
    details: Optional[dict] = None
