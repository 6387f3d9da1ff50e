"""
Candy Machine Config Wizard - Question Flow Controller

This module drives the interactive ``create-config`` flow. It asks a fixed, ordered script
of questions through the validation engine, writes every accepted answer into a
ConfigAssembler, and branches into optional sub-flows depending on earlier answers.

Question Order:
1. Price, item count, symbol, seller fee basis points
2. Go-live date (free text, stored verbatim, empty for unset)
3. Creators: count, then address and royalty share per creator
4. Optional features (multi-select)
5. Treasury: SPL token mint + token account, or a SOL treasury address
6-10. Gatekeeper, whitelist, end settings, hidden settings, freeze sub-flows
11. Upload method and its follow-up questions
12. Retain authority, is mutable
13. Persistence decision (see ``mcp_sugar_config.persistence``)

Only one question is outstanding at any time. Cancellation and fatal errors propagate out
of ``run`` before the persistence gateway is reached, so nothing is ever half-written.
"""
from typing import FrozenSet, List

from mcp_sugar_config.assembler import ConfigAssembler
from mcp_sugar_config.config import CONFIG_DOCS_URL, MAX_CREATORS, MAX_FREEZE_DAYS
from mcp_sugar_config.prompts import (
    Prompter,
    choice_options,
    confirm_options,
    multi_choice_options,
    text_options,
)
from mcp_sugar_config.schemas import (
    AmountEndSettings,
    AwsUpload,
    BundlrUpload,
    ConfigDocument,
    Creator,
    DateEndSettings,
    EndSettingType,
    Feature,
    Gatekeeper,
    GatekeeperNetwork,
    HiddenSettings,
    NftStorageUpload,
    ShdwUpload,
    SolTreasury,
    SplTokenTreasury,
    UploadMethodKind,
    Whitelist,
    WhitelistMintMode,
)
from mcp_sugar_config.persistence import PersistenceGateway, PersistResult, Storage
from mcp_sugar_config.validators import (
    AccountResolver,
    ShareTally,
    ask_validated,
    days_to_seconds,
    end_amount_validator,
    normalize_date,
    spl_mint_validator,
    spl_token_account_validator,
    validate_creator_count,
    validate_discount_price,
    validate_freeze_days,
    validate_hidden_name,
    validate_item_count,
    validate_price,
    validate_pubkey,
    validate_seller_fee,
    validate_symbol,
    validate_uri,
)
from mcp.server.fastmcp.utilities.logging import get_logger

logger = get_logger(__name__)

DATE_HINT = (
    "Many common formats are supported. If unsure, try YYYY-MM-DD HH:MM:SS [+/-]UTC-OFFSET "
    "or type 'now' for current time. For example 2022-05-02 18:00:00 +0000 for May 2, 2022 18:00:00 UTC."
)


def _labels(enum_cls) -> List[str]:
    return [member.label for member in enum_cls]


class ConfigWizard:
    """One wizard run. Create a new instance for every run."""

    def __init__(self, prompter: Prompter, resolver: AccountResolver):
        self.prompter = prompter
        self.resolver = resolver
        self.assembler = ConfigAssembler()

    async def _ask(self, message, options, validator=None):
        return await ask_validated(self.prompter, message, options, validator)

    async def run(self) -> ConfigDocument:
        self.prompter.println("[1/2] Sugar interactive config maker")
        self.prompter.println("\nCheck out our Candy Machine config docs to learn about the options:")
        self.prompter.println(f"  -> {CONFIG_DOCS_URL}\n")

        await self._ask_basics()
        await self._ask_go_live_date()
        await self._ask_creators()

        features = await self._ask_features()
        await self._ask_treasury(Feature.spl_token in features)
        await self._ask_gatekeeper(Feature.gatekeeper in features)
        await self._ask_whitelist(Feature.whitelist in features)
        await self._ask_end_settings(Feature.end_settings in features)
        await self._ask_hidden_settings(Feature.hidden_settings in features)
        await self._ask_freeze(Feature.freeze in features)

        await self._ask_upload_method()
        await self._ask_authority()

        document = self.assembler.build()
        logger.info(f"Config assembled: {document.number} items, {len(document.creators)} creator(s)")
        return document

    # --- Steps ---

    async def _ask_basics(self) -> None:
        set_field = self.assembler.set
        set_field("price", await self._ask("What is the price of each NFT?", text_options(), validate_price))
        set_field(
            "number",
            await self._ask("How many NFTs will you have in your candy machine?", text_options(), validate_item_count),
        )
        set_field(
            "symbol",
            await self._ask(
                "What is the symbol of your collection? Hit [ENTER] for no symbol.",
                text_options(allow_empty=True),
                validate_symbol,
            ),
        )
        set_field(
            "seller_fee_basis_points",
            await self._ask("What is the seller fee basis points?", text_options(), validate_seller_fee),
        )

    async def _ask_go_live_date(self) -> None:
        # Stored verbatim, sugar parses it when the candy machine is deployed
        date = await self._ask(f"What is your go live date? {DATE_HINT}", text_options(allow_empty=True))
        self.assembler.set("go_live_date", date or None)

    async def _ask_creators(self) -> None:
        count = await self._ask(
            f"How many creator wallets do you have? (max limit of {MAX_CREATORS})",
            text_options(),
            validate_creator_count,
        )
        tally = ShareTally()
        creators = []
        for position in range(1, count + 1):
            address = await self._ask(f"Enter creator wallet address #{position}", text_options(), validate_pubkey)
            share = await self._ask(
                f"Enter royalty percentage share for creator #{position} (e.g., 70). Total shares must add to 100.",
                text_options(),
                tally.validator(is_last=position == count),
            )
            tally.add(share)
            creators.append(Creator(address=address, share=share, verified=False))
        self.assembler.set("creators", tuple(creators))

    async def _ask_features(self) -> FrozenSet[Feature]:
        features = list(Feature)
        selected = await self._ask(
            "Which extra features do you want to use? Leave empty for no extra features. (e.g. 0,2)",
            multi_choice_options(_labels(Feature)),
        )
        chosen = frozenset(features[index] for index in selected)
        logger.debug(f"Selected features: {sorted(feature.value for feature in chosen)}")
        return chosen

    async def _ask_treasury(self, use_spl_token: bool) -> None:
        if use_spl_token:
            mint = await self._ask(
                "What is your SPL token mint address?",
                text_options(),
                spl_mint_validator(self.resolver),
            )
            account = await self._ask(
                "What is your SPL token account address (the account that will hold the SPL token mints)?",
                text_options(),
                spl_token_account_validator(self.resolver),
            )
            self.assembler.set("treasury", SplTokenTreasury(mint=mint, account=account))
        else:
            address = await self._ask("What is your SOL treasury address?", text_options(), validate_pubkey)
            self.assembler.set("treasury", SolTreasury(address=address))

    async def _ask_gatekeeper(self, selected: bool) -> None:
        if not selected:
            self.assembler.set_absent("gatekeeper")
            return
        networks = list(GatekeeperNetwork)
        index = await self._ask(
            "Which gatekeeper network do you want to use? Check "
            "https://docs.metaplex.com/guides/archived/candy-machine-v2/configuration#provider-networks for more info.",
            choice_options(_labels(GatekeeperNetwork), default=0),
        )
        expire_on_use = await self._ask(
            "To help prevent bots even more, do you want to expire the gatekeeper token on each mint?",
            confirm_options(),
        )
        self.assembler.set("gatekeeper", Gatekeeper(network=networks[index].value, expire_on_use=expire_on_use))

    async def _ask_whitelist(self, selected: bool) -> None:
        if not selected:
            self.assembler.set_absent("whitelist")
            return
        mint = await self._ask("What is your WL token mint address?", text_options(), validate_pubkey)
        burn = await self._ask("Do you want the whitelist token to be burned on each mint?", confirm_options())
        presale = await self._ask("Do you want to enable presale mint with your whitelist token?", confirm_options())

        discount_price = None
        if presale:
            price = await self._ask(
                "What is the discount price for the presale? Hit [ENTER] to not set a discount price.",
                text_options(allow_empty=True),
                validate_discount_price,
            )
            discount_price = price if price != "" else None

        self.assembler.set(
            "whitelist",
            Whitelist(
                mint=mint,
                burn_mode=WhitelistMintMode.burn_every_time if burn else WhitelistMintMode.never_burn,
                presale=presale,
                discount_price=discount_price,
            ),
        )

    async def _ask_end_settings(self, selected: bool) -> None:
        if not selected:
            self.assembler.set_absent("end_settings")
            return
        setting_types = list(EndSettingType)
        index = await self._ask(
            "What end settings type do you want to use?",
            choice_options(_labels(EndSettingType), default=0),
        )
        if setting_types[index] is EndSettingType.amount:
            amount = await self._ask(
                "What is the amount to stop the mint?",
                text_options(),
                end_amount_validator(self.assembler.get("number")),
            )
            self.assembler.set("end_settings", AmountEndSettings(number=amount))
        else:
            date = await self._ask(f"What is the date to stop the mint? {DATE_HINT}", text_options(), normalize_date)
            self.assembler.set("end_settings", DateEndSettings(date=date))

    async def _ask_hidden_settings(self, selected: bool) -> None:
        if not selected:
            self.assembler.set_absent("hidden_settings")
            return
        name = await self._ask(
            "What is the prefix name for your hidden settings mints? "
            "The mint index will be appended at the end of the name.",
            text_options(),
            validate_hidden_name,
        )
        uri = await self._ask("What is URI to be used for each mint?", text_options(), validate_uri)
        self.assembler.set("hidden_settings", HiddenSettings(name=name, uri=uri))

    async def _ask_freeze(self, selected: bool) -> None:
        if not selected:
            self.assembler.set_absent("freeze_time")
            return
        days = await self._ask(
            f"How many days do you want to freeze the treasury funds and minted NFTs for? (max: {MAX_FREEZE_DAYS})",
            text_options(default=str(MAX_FREEZE_DAYS)),
            validate_freeze_days,
        )
        self.assembler.set("freeze_time", days_to_seconds(days))

    async def _ask_upload_method(self) -> None:
        methods = list(UploadMethodKind)
        index = await self._ask(
            "What upload method do you want to use?",
            choice_options(_labels(UploadMethodKind), default=0),
        )
        method = methods[index]

        if method is UploadMethodKind.aws:
            bucket = await self._ask("What is the AWS S3 bucket name?", text_options())
            profile = await self._ask("What is the AWS profile name?", text_options(default="default"))
            directory = await self._ask(
                "What is the directory to upload to? Leave blank to store files at the bucket root dir.",
                text_options(default=""),
            )
            upload = AwsUpload(bucket=bucket, profile=profile, directory=directory)
        elif method is UploadMethodKind.nft_storage:
            token = await self._ask("What is the NFT Storage authentication token?", text_options())
            upload = NftStorageUpload(auth_token=token)
        elif method is UploadMethodKind.shdw:
            address = await self._ask("What is the SHDW storage address?", text_options(), validate_pubkey)
            upload = ShdwUpload(storage_account=address)
        else:
            upload = BundlrUpload()

        logger.debug(f"Upload method: {method.value}")
        self.assembler.set("upload_method", upload)

    async def _ask_authority(self) -> None:
        self.assembler.set(
            "retain_authority",
            await self._ask(
                "Do you want to retain update authority on your NFTs? We HIGHLY recommend you choose yes.",
                confirm_options(),
            ),
        )
        self.assembler.set(
            "is_mutable",
            await self._ask(
                "Do you want your NFTs to remain mutable? We HIGHLY recommend you choose yes.",
                confirm_options(),
            ),
        )


async def create_config(
    prompter: Prompter,
    storage: Storage,
    resolver: AccountResolver,
    path: str,
) -> PersistResult:
    """Run the wizard and persist (or print) the resulting config."""
    document = await ConfigWizard(prompter, resolver).run()
    prompter.println("\n[2/2] Saving config file\n")
    return await PersistenceGateway(storage, prompter, path).persist(document)
