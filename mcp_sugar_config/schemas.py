"""
Pydantic Data Models for the Candy Machine Configuration

This module defines the configuration document produced by the wizard and the enums that
name every discrete choice the operator makes. The models are frozen: once the assembler
emits a ConfigDocument it is never mutated again.

Key Components:
- Feature, UploadMethodKind, EndSettingType, GatekeeperNetwork: named choices shown to the
  operator, in display order
- Creator: a royalty recipient
- Treasury, EndSettings, UploadMethod: variant payloads discriminated by their ``kind``
- ConfigDocument: the complete configuration, every field required

Absent features:
    Optional feature blocks are typed ``Optional[...]`` without a default, so the document
    cannot be constructed unless each of them is passed explicitly (``None`` is the absent
    marker). Serialization therefore always contains every key.

Cross-field rules (share total, end amount, presale discount) are re-checked by model
validators so a document can never exist in an inconsistent state.
"""
from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from mcp_sugar_config.config import (
    MAX_CREATORS,
    MAX_FREEZE_DAYS,
    MAX_NAME_LENGTH,
    MAX_SELLER_FEE_BASIS_POINTS,
    MAX_SYMBOL_LENGTH,
    MAX_URI_LENGTH,
    SECONDS_PER_DAY,
    TOTAL_CREATOR_SHARE,
)
from mcp_sugar_config.utils import check_pubkey, check_uri


PubkeyStr = Annotated[str, AfterValidator(check_pubkey)]
UriStr = Annotated[str, Field(max_length=MAX_URI_LENGTH), AfterValidator(check_uri)]


class Feature(str, Enum):
    spl_token = "spl_token"
    gatekeeper = "gatekeeper"
    whitelist = "whitelist"
    end_settings = "end_settings"
    hidden_settings = "hidden_settings"
    freeze = "freeze"

    @property
    def label(self) -> str:
        return _LABELS[self]


class UploadMethodKind(str, Enum):
    bundlr = "bundlr"
    aws = "aws"
    nft_storage = "nft_storage"
    shdw = "shdw"

    @property
    def label(self) -> str:
        return _LABELS[self]


class EndSettingType(str, Enum):
    amount = "amount"
    date = "date"

    @property
    def label(self) -> str:
        return _LABELS[self]


class GatekeeperNetwork(str, Enum):
    civic = "ignREusXmGrscGNUesoU9mxfds9AiYTezUKex2PsZV6"
    encore = "tibePmPaoTgrs929rWpu755EXaxC7M3SthVCf6GzjZt"

    @property
    def label(self) -> str:
        return _LABELS[self]


class WhitelistMintMode(str, Enum):
    burn_every_time = "burnEveryTime"
    never_burn = "neverBurn"


_LABELS = {
    Feature.spl_token: "SPL Token Mint",
    Feature.gatekeeper: "Gatekeeper",
    Feature.whitelist: "Whitelist Mint",
    Feature.end_settings: "End Settings",
    Feature.hidden_settings: "Hidden Settings",
    Feature.freeze: "Freeze Settings",
    UploadMethodKind.bundlr: "Bundlr",
    UploadMethodKind.aws: "AWS",
    UploadMethodKind.nft_storage: "NFT Storage",
    UploadMethodKind.shdw: "SHDW",
    EndSettingType.amount: "Amount",
    EndSettingType.date: "Date",
    GatekeeperNetwork.civic: "Civic Pass",
    GatekeeperNetwork.encore: "Verify by Encore",
}


class ConfigModel(BaseModel):
    """Base for all config models: immutable, camelCase on the wire."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Creator(ConfigModel):
    address: PubkeyStr
    share: int = Field(ge=0, le=TOTAL_CREATOR_SHARE)
    # Creators sign separately after deployment
    verified: bool = False


# --- Treasury ---

class SolTreasury(ConfigModel):
    kind: Literal["sol"] = "sol"
    address: PubkeyStr


class SplTokenTreasury(ConfigModel):
    kind: Literal["spl_token"] = "spl_token"
    mint: PubkeyStr
    account: PubkeyStr


Treasury = Annotated[Union[SolTreasury, SplTokenTreasury], Field(discriminator="kind")]


# --- Optional feature blocks ---

class Gatekeeper(ConfigModel):
    network: PubkeyStr
    expire_on_use: bool


class Whitelist(ConfigModel):
    mint: PubkeyStr
    burn_mode: WhitelistMintMode
    presale: bool
    discount_price: Optional[Annotated[float, Field(gt=0, allow_inf_nan=False)]] = None

    @model_validator(mode="after")
    def _discount_requires_presale(self) -> "Whitelist":
        if self.discount_price is not None and not self.presale:
            raise ValueError("A discount price can only be set for a presale whitelist.")
        return self


class AmountEndSettings(ConfigModel):
    kind: Literal["amount"] = "amount"
    number: int = Field(ge=0)


class DateEndSettings(ConfigModel):
    kind: Literal["date"] = "date"
    date: str


EndSettings = Annotated[Union[AmountEndSettings, DateEndSettings], Field(discriminator="kind")]


class HiddenSettings(ConfigModel):
    name: str = Field(max_length=MAX_NAME_LENGTH)
    uri: UriStr
    # Filled in by `sugar hash` once the cache file exists
    hash: str = ""


# --- Upload method ---

class BundlrUpload(ConfigModel):
    kind: Literal["bundlr"] = "bundlr"


class AwsUpload(ConfigModel):
    kind: Literal["aws"] = "aws"
    bucket: str = Field(min_length=1)
    profile: str = "default"
    directory: str = ""


class NftStorageUpload(ConfigModel):
    kind: Literal["nft_storage"] = "nft_storage"
    auth_token: str = Field(min_length=1)


class ShdwUpload(ConfigModel):
    kind: Literal["shdw"] = "shdw"
    storage_account: PubkeyStr


UploadMethod = Annotated[
    Union[BundlrUpload, AwsUpload, NftStorageUpload, ShdwUpload],
    Field(discriminator="kind"),
]


# --- Document ---

class ConfigDocument(ConfigModel):
    price: float = Field(gt=0, allow_inf_nan=False)
    number: int = Field(gt=0)
    symbol: str = Field(max_length=MAX_SYMBOL_LENGTH)
    seller_fee_basis_points: int = Field(ge=0, le=MAX_SELLER_FEE_BASIS_POINTS)
    go_live_date: Optional[str]
    creators: Tuple[Creator, ...] = Field(min_length=1, max_length=MAX_CREATORS)
    treasury: Treasury
    gatekeeper: Optional[Gatekeeper]
    whitelist: Optional[Whitelist]
    end_settings: Optional[EndSettings]
    hidden_settings: Optional[HiddenSettings]
    # Seconds, the operator answers in days
    freeze_time: Optional[Annotated[int, Field(ge=0, le=MAX_FREEZE_DAYS * SECONDS_PER_DAY)]]
    upload_method: UploadMethod
    retain_authority: bool
    is_mutable: bool

    @model_validator(mode="after")
    def _check_cross_field_rules(self) -> "ConfigDocument":
        total_share = sum(creator.share for creator in self.creators)
        if total_share != TOTAL_CREATOR_SHARE:
            raise ValueError(
                f"Royalty share for all creators must total {TOTAL_CREATOR_SHARE} percent, got {total_share}."
            )
        if isinstance(self.end_settings, AmountEndSettings) and self.end_settings.number > self.number:
            raise ValueError(
                "End settings amount cannot be more than the number of items in the candy machine."
            )
        return self


FIELD_NAMES: List[str] = list(ConfigDocument.model_fields)


def serialize_document(document: ConfigDocument) -> str:
    """Render the document as stable, pretty-printed JSON (absent features as null)."""
    return document.model_dump_json(by_alias=True, indent=2)


def load_document(text: str) -> ConfigDocument:
    """Parse and validate a serialized document."""
    return ConfigDocument.model_validate_json(text)
