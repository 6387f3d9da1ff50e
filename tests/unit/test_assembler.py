import pytest
from pydantic import ValidationError

from mcp_sugar_config.assembler import ConfigAssembler
from mcp_sugar_config.errors import AssemblerError, IncompleteConfigError
from mcp_sugar_config.schemas import ConfigDocument, SolTreasury


def _fill(assembler, values):
    for field, value in values.items():
        if value is None:
            assembler.set_absent(field)
        else:
            assembler.set(field, value)


def test_build_emits_frozen_document(document_values):
    assembler = ConfigAssembler()
    _fill(assembler, document_values)
    document = assembler.build()

    assert isinstance(document, ConfigDocument)
    assert isinstance(document.treasury, SolTreasury)
    assert document.gatekeeper is None
    with pytest.raises(ValidationError):
        document.price = 2.0


def test_field_is_write_once():
    assembler = ConfigAssembler()
    assembler.set("price", 1.0)
    with pytest.raises(AssemblerError, match="already set"):
        assembler.set("price", 2.0)
    with pytest.raises(AssemblerError):
        assembler.set_absent("price")
    assert assembler.get("price") == 1.0


def test_unknown_field_rejected():
    with pytest.raises(AssemblerError, match="Unknown config field"):
        ConfigAssembler().set("freeze_days", 3)


def test_get_unset_field():
    with pytest.raises(AssemblerError, match="has not been set"):
        ConfigAssembler().get("number")


def test_build_requires_every_field_including_absent_ones(document_values):
    assembler = ConfigAssembler()
    values = dict(document_values)
    del values["whitelist"]
    _fill(assembler, values)

    assert assembler.missing_fields == ["whitelist"]
    with pytest.raises(IncompleteConfigError, match="whitelist"):
        assembler.build()

    assembler.set_absent("whitelist")
    assert assembler.build().whitelist is None


def test_no_writes_after_build(document_values):
    assembler = ConfigAssembler()
    _fill(assembler, document_values)
    assembler.build()
    with pytest.raises(AssemblerError):
        assembler.build()
    with pytest.raises(AssemblerError, match="already built"):
        assembler.set("price", 3.0)


def test_build_rejects_inconsistent_values(document_values):
    assembler = ConfigAssembler()
    values = dict(document_values)
    values["end_settings"] = {"kind": "amount", "number": 101}
    _fill(assembler, values)
    with pytest.raises(AssemblerError, match="invalid"):
        assembler.build()
