"""Engine configuration."""

from pydantic import BaseModel, ConfigDict, Field

from .kernel.history import DEFAULT_MAX_ENTRIES
from .kernel.model import DEFAULT_ARROWS, SCHEMA_LAYOUT_VERSION
from .kernel.projection import DEFAULT_COLUMN_SPACING


DEFAULT_TABLE_SPACING = 300.0


class EngineConfig(BaseModel):
    """Tunables for a lineage session.

    Passed explicitly to the controller and the API functions; there is no
    environment or settings-file layer.
    """
    history_limit: int = Field(
        default=DEFAULT_MAX_ENTRIES,
        ge=1,
        description="Maximum number of undo/redo entries kept",
    )
    table_spacing: float = Field(
        default=DEFAULT_TABLE_SPACING,
        gt=0,
        description="Horizontal distance between tables placed by a CSV import",
    )
    column_spacing: float = Field(
        default=DEFAULT_COLUMN_SPACING,
        gt=0,
        description="Vertical offset between a table and its derived column positions",
    )
    default_arrows: str = Field(
        default=DEFAULT_ARROWS,
        min_length=1,
        description="Arrow style for new edges that do not specify one",
    )
    layout_version: str = Field(
        default=SCHEMA_LAYOUT_VERSION,
        description="layout_version tag stamped into newly created documents",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)
