"""Fungible token metadata.

Informational only: pricing and ledger logic never read it.
"""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from toyamm.constants import DEFAULT_DECIMALS, FT_METADATA_SPEC


class AssetMetadata(BaseModel):
    """Display metadata of one pool asset."""

    spec: str = FT_METADATA_SPEC
    name: str = "Example NEAR fungible token"
    symbol: str = "EXAMPLE"
    icon: str | None = None
    reference: str | None = None
    reference_hash: str | None = None
    # Most fungible tokens on the host use 24 decimals; uint128 tops out near 38
    decimals: int = Field(default=DEFAULT_DECIMALS, ge=0, le=38)

    model_config = {"frozen": True}


@runtime_checkable
class MetadataLookup(Protocol):
    """Source of asset metadata (typically the token contract itself)."""

    def metadata(self, asset: str) -> AssetMetadata | None:
        """Return metadata for asset, or None when it cannot be fetched."""
        ...
