import json

import pytest
from pydantic import ValidationError

from mcp_sugar_config.schemas import (
    AmountEndSettings,
    ConfigDocument,
    Feature,
    GatekeeperNetwork,
    UploadMethodKind,
    Whitelist,
    WhitelistMintMode,
    load_document,
    serialize_document,
)


def test_absent_features_serialize_as_null(document_values):
    data = json.loads(serialize_document(ConfigDocument.model_validate(document_values)))

    for key in ("gatekeeper", "whitelist", "endSettings", "hiddenSettings", "freezeTime", "goLiveDate"):
        assert key in data
        assert data[key] is None
    assert data["sellerFeeBasisPoints"] == 500
    assert data["uploadMethod"] == {"kind": "bundlr"}
    assert data["treasury"]["kind"] == "sol"
    assert data["creators"][0]["verified"] is False


def test_serialization_is_stable(document_values):
    document = ConfigDocument.model_validate(document_values)
    text = serialize_document(document)
    assert serialize_document(load_document(text)) == text


def test_absent_features_must_be_explicit(document_values):
    values = dict(document_values)
    del values["hidden_settings"]
    with pytest.raises(ValidationError, match="hidden_settings|hiddenSettings"):
        ConfigDocument.model_validate(values)


@pytest.mark.parametrize("shares", [(60, 50), (60, 30), (100, 0, 10)])
def test_creator_shares_must_total_100(document_values, new_address, shares):
    values = dict(document_values)
    values["creators"] = tuple({"address": new_address(), "share": share} for share in shares)
    with pytest.raises(ValidationError):
        ConfigDocument.model_validate(values)


def test_at_most_four_creators(document_values, new_address):
    values = dict(document_values)
    values["creators"] = tuple({"address": new_address(), "share": 20} for _ in range(5))
    with pytest.raises(ValidationError):
        ConfigDocument.model_validate(values)


def test_end_amount_cannot_exceed_item_count(document_values):
    values = dict(document_values)
    values["end_settings"] = {"kind": "amount", "number": 100}
    assert isinstance(ConfigDocument.model_validate(values).end_settings, AmountEndSettings)

    values["end_settings"] = {"kind": "amount", "number": 101}
    with pytest.raises(ValidationError, match="End settings amount"):
        ConfigDocument.model_validate(values)


def test_freeze_time_bounds(document_values):
    values = dict(document_values)
    values["freeze_time"] = 31 * 86_400
    assert ConfigDocument.model_validate(values).freeze_time == 2_678_400

    values["freeze_time"] = 32 * 86_400
    with pytest.raises(ValidationError):
        ConfigDocument.model_validate(values)


def test_discount_price_requires_presale(new_address):
    whitelist = Whitelist(mint=new_address(), burn_mode=WhitelistMintMode.never_burn, presale=True, discount_price=0.5)
    assert whitelist.discount_price == 0.5
    with pytest.raises(ValidationError, match="presale"):
        Whitelist(mint=new_address(), burn_mode=WhitelistMintMode.never_burn, presale=False, discount_price=0.5)


def test_invalid_addresses_rejected(document_values):
    values = dict(document_values)
    values["treasury"] = {"kind": "sol", "address": "not-a-key"}
    with pytest.raises(ValidationError, match="not a valid public key"):
        ConfigDocument.model_validate(values)


def test_hidden_settings_uri_checked(document_values):
    values = dict(document_values)
    values["hidden_settings"] = {"name": "Mystery #", "uri": "nope"}
    with pytest.raises(ValidationError):
        ConfigDocument.model_validate(values)


def test_choice_labels_in_display_order():
    assert [feature.label for feature in Feature] == [
        "SPL Token Mint",
        "Gatekeeper",
        "Whitelist Mint",
        "End Settings",
        "Hidden Settings",
        "Freeze Settings",
    ]
    assert [method.label for method in UploadMethodKind] == ["Bundlr", "AWS", "NFT Storage", "SHDW"]
    assert list(GatekeeperNetwork)[0].label == "Civic Pass"
