"""
Staged construction of a Kakarot genesis.

Each stage is its own class and only exposes the operations valid at that
point: classes are loaded first, then the Kakarot contract is deployed, and
only then can accounts be added and funded. Every operation consumes the
builder it is called on and hands back a new one; using a consumed builder
raises `ConsumedBuilder`.

    genesis = (
        GenesisBuilder()
        .load_classes("build/")
        .deploy_kakarot(coinbase)
        .add_account(private_key)
        .fund(private_key, 10**18)
        .build()
    )
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .addresses import (
    ContractAddress,
    deployed_address,
    evm_address,
    proxy_address,
    split_u256,
    storage_slot_address,
)
from .constants import (
    CONTRACT_ACCOUNT_CLASS,
    DEFAULT_FEE_TOKEN_ADDRESS,
    EOA_CLASS,
    FEE_TOKEN_DECIMALS,
    FEE_TOKEN_NAME,
    FEE_TOKEN_SYMBOL,
    KAKAROT_ADDRESS_KEY,
    KAKAROT_CLASS,
    PRECOMPILES_CLASS,
    PROXY_CLASS,
    SALT,
    U128_MAX,
)
from .document import (
    FeeTokenConfig,
    GasPrices,
    GenesisClass,
    GenesisContract,
    GenesisDocument,
    Manifest,
)
from .errors import (
    ConsumedBuilder,
    MissingAccount,
    MissingCacheEntry,
    MissingClassHash,
    MissingKakarotContract,
)
from .loader import DeclaredClass, load_classes
from .logger import Logger


@dataclass
class GenesisState:
    coinbase: int = 0
    classes: List[DeclaredClass] = field(default_factory=list)
    class_hashes: Dict[str, int] = field(default_factory=dict)
    contracts: Dict[ContractAddress, GenesisContract] = field(default_factory=dict)
    fee_token_storage: Dict[int, int] = field(default_factory=dict)
    cache: Dict[str, int] = field(default_factory=dict)


class BuilderStage:
    def __init__(self, state: Optional[GenesisState] = None):
        self._state = state if state is not None else GenesisState()
        self.logger = Logger("genesis")

    def _take(self) -> GenesisState:
        """
        Moves the state out of this builder.
        """
        state = self._peek()
        self._state = None
        return state

    def _peek(self) -> GenesisState:
        if self._state is None:
            raise ConsumedBuilder()
        return self._state

    @property
    def consumed(self) -> bool:
        return self._state is None

    def class_hash(self, name: str) -> int:
        try:
            return self._peek().class_hashes[name]
        except KeyError:
            raise MissingClassHash(name) from None

    def kakarot_class_hash(self) -> int:
        return self.class_hash(KAKAROT_CLASS)

    def contract_account_class_hash(self) -> int:
        return self.class_hash(CONTRACT_ACCOUNT_CLASS)

    def eoa_class_hash(self) -> int:
        return self.class_hash(EOA_CLASS)

    def proxy_class_hash(self) -> int:
        return self.class_hash(PROXY_CLASS)

    def precompiles_class_hash(self) -> int:
        return self.class_hash(PRECOMPILES_CLASS)

    @property
    def class_hashes(self) -> Dict[str, int]:
        return dict(self._peek().class_hashes)

    @property
    def cache(self) -> Dict[str, int]:
        return dict(self._peek().cache)


class GenesisBuilder(BuilderStage):
    """
    Empty builder, the only thing to do is to load the classes.
    """

    def load_classes(self, path, max_workers=None) -> "LoadedGenesisBuilder":
        state = self._take()

        kwargs = {} if max_workers is None else dict(max_workers=max_workers)
        (state.classes, state.class_hashes) = load_classes(path, **kwargs)

        self.logger.debug(f"declared {sorted(state.class_hashes)}")
        return LoadedGenesisBuilder(state)


class LoadedGenesisBuilder(BuilderStage):
    def deploy_kakarot(self, coinbase_address: int) -> "InitializedGenesisBuilder":
        """
        Adds the Kakarot contract, deployed through the UDC with the constructor
        arguments of kakarot.cairo, and records the coinbase.
        """
        state = self._take()
        stage = BuilderStage(state)

        kakarot_class_hash = stage.kakarot_class_hash()
        contract_account_class_hash = stage.contract_account_class_hash()
        eoa_class_hash = stage.eoa_class_hash()
        proxy_class_hash = stage.proxy_class_hash()
        precompiles_class_hash = stage.precompiles_class_hash()

        # constructor(owner, native_token, contract_account, eoa, proxy, precompiles)
        kakarot_address = deployed_address(
            SALT,
            kakarot_class_hash,
            [
                0,
                DEFAULT_FEE_TOKEN_ADDRESS,
                contract_account_class_hash,
                eoa_class_hash,
                proxy_class_hash,
                precompiles_class_hash,
            ],
        )
        state.cache[KAKAROT_ADDRESS_KEY] = kakarot_address

        kakarot_storage = {
            storage_slot_address("native_token_address"): DEFAULT_FEE_TOKEN_ADDRESS,
            storage_slot_address(
                "contract_account_class_hash"
            ): contract_account_class_hash,
            storage_slot_address("externally_owned_account_class_hash"): eoa_class_hash,
            storage_slot_address("account_proxy_class_hash"): proxy_class_hash,
            storage_slot_address("precompiles_class_hash"): precompiles_class_hash,
            storage_slot_address("coinbase"): coinbase_address,
        }

        state.contracts[kakarot_address] = GenesisContract(
            class_hash=kakarot_class_hash, storage=kakarot_storage
        )
        state.coinbase = coinbase_address

        self.logger.debug(f"kakarot deployed at {hex(kakarot_address)}")
        return InitializedGenesisBuilder(state)


class InitializedGenesisBuilder(BuilderStage):
    def add_account(self, private_key) -> "InitializedGenesisBuilder":
        """
        Deploys the EOA of the private key's evm address and lets Kakarot spend
        its fee tokens.
        """
        state = self._take()
        stage = InitializedGenesisBuilder(state)

        account_evm_address = evm_address(private_key)

        kakarot_address = stage.cache_load(KAKAROT_ADDRESS_KEY)
        eoa_class_hash = stage.eoa_class_hash()
        proxy_class_hash = stage.proxy_class_hash()

        eoa_storage = {
            storage_slot_address("evm_address"): account_evm_address,
            storage_slot_address("kakarot_address"): kakarot_address,
            storage_slot_address("_implementation"): eoa_class_hash,
        }

        starknet_address = stage.compute_starknet_address(account_evm_address)
        state.contracts[starknet_address] = GenesisContract(
            class_hash=proxy_class_hash, storage=eoa_storage
        )

        key = storage_slot_address(
            "ERC20_allowances", [starknet_address, kakarot_address]
        )
        state.fee_token_storage[key] = U128_MAX
        state.fee_token_storage[key + 1] = U128_MAX

        kakarot = state.contracts.get(ContractAddress(kakarot_address))
        if kakarot is None:
            raise MissingKakarotContract(kakarot_address)
        if kakarot.storage is None:
            kakarot.storage = {}
        kakarot.storage[
            storage_slot_address("evm_to_starknet_address", [account_evm_address])
        ] = starknet_address

        self.logger.debug(
            f"account {hex(account_evm_address)} deployed at {hex(starknet_address)}"
        )
        return stage

    def fund(self, private_key, amount: int) -> "InitializedGenesisBuilder":
        """
        Credits `amount` fee tokens to the account deployed for the private key.
        """
        state = self._take()
        stage = InitializedGenesisBuilder(state)

        starknet_address = stage.compute_starknet_address(evm_address(private_key))
        eoa = state.contracts.get(starknet_address)
        if eoa is None:
            raise MissingAccount(starknet_address)

        (low, high) = split_u256(amount)

        key = storage_slot_address("ERC20_balances", [starknet_address])
        state.fee_token_storage[key] = low
        state.fee_token_storage[key + 1] = high

        eoa.balance = amount

        return stage

    def build(self) -> GenesisDocument:
        """
        Consumes the builder into the genesis document.
        """
        state = self._take()
        sequencer_address = InitializedGenesisBuilder(state).compute_starknet_address(
            state.coinbase
        )

        classes = [
            GenesisClass(artifact=declared.artifact, class_hash=declared.class_hash)
            for declared in state.classes
        ]

        return GenesisDocument(
            parent_hash=0,
            state_root=0,
            number=0,
            timestamp=0,
            sequencer_address=sequencer_address,
            gas_prices=GasPrices(),
            classes=classes,
            fee_token=FeeTokenConfig(
                name=FEE_TOKEN_NAME,
                symbol=FEE_TOKEN_SYMBOL,
                decimals=FEE_TOKEN_DECIMALS,
                storage=state.fee_token_storage,
            ),
            contracts=state.contracts,
        )

    def manifest(self) -> Manifest:
        return Manifest(declarations=self.class_hashes, deployments=self.cache)

    def compute_starknet_address(self, account_evm_address: int) -> ContractAddress:
        """
        Address of the account proxy Kakarot deploys for an evm address.
        """
        kakarot_address = self.cache_load(KAKAROT_ADDRESS_KEY)
        return proxy_address(
            kakarot_address, account_evm_address, self.proxy_class_hash()
        )

    def cache_load(self, key: str) -> int:
        try:
            return self._peek().cache[key]
        except KeyError:
            raise MissingCacheEntry(key) from None
