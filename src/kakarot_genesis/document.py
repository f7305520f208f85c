"""
Genesis document and manifest, laid out as katana's genesis json.
"""

from dataclasses import field
from typing import Any, Dict, List, Optional

import marshmallow_dataclass
from marshmallow import fields as mfields
from starkware.starkware_utils.marshmallow_dataclass_fields import IntAsHex


def felt_metadata(data_key=None, allow_none=False):
    kwargs = dict(required=not allow_none, allow_none=allow_none)
    if data_key is not None:
        kwargs["data_key"] = data_key
    return dict(marshmallow_field=IntAsHex(**kwargs))


def storage_metadata():
    return dict(
        marshmallow_field=mfields.Dict(
            keys=IntAsHex(), values=IntAsHex(), allow_none=True
        )
    )


def hex_mapping_metadata(keys):
    return dict(
        marshmallow_field=mfields.Dict(keys=keys, values=IntAsHex(), required=True)
    )


@marshmallow_dataclass.dataclass(frozen=True)
class GasPrices:
    eth: int = field(default=0, metadata=dict(data_key="ETH"))
    strk: int = field(default=0, metadata=dict(data_key="STRK"))


@marshmallow_dataclass.dataclass(frozen=True)
class GenesisClass:
    artifact: Dict[str, Any] = field(
        metadata=dict(marshmallow_field=mfields.Raw(data_key="class", required=True))
    )
    class_hash: Optional[int] = field(
        default=None, metadata=felt_metadata("classHash", allow_none=True)
    )


@marshmallow_dataclass.dataclass
class GenesisContract:
    """
    State of a contract deployed at genesis. The builder mutates these in
    place until the document is built.
    """

    class_hash: int = field(metadata=felt_metadata("class"))
    balance: Optional[int] = field(
        default=None, metadata=felt_metadata(allow_none=True)
    )
    nonce: Optional[int] = field(default=None, metadata=felt_metadata(allow_none=True))
    storage: Optional[Dict[int, int]] = field(
        default=None, metadata=storage_metadata()
    )


@marshmallow_dataclass.dataclass(frozen=True)
class FeeTokenConfig:
    name: str
    symbol: str
    decimals: int
    address: Optional[int] = field(
        default=None, metadata=felt_metadata(allow_none=True)
    )
    class_hash: Optional[int] = field(
        default=None, metadata=felt_metadata("class", allow_none=True)
    )
    storage: Optional[Dict[int, int]] = field(
        default=None, metadata=storage_metadata()
    )


@marshmallow_dataclass.dataclass(frozen=True)
class GenesisDocument:
    """
    Initial state of the network. `accounts` stays empty: accounts are
    contracts funded through the fee token storage. There is no universal
    deployer.
    """

    parent_hash: int = field(metadata=felt_metadata("parentHash"))
    state_root: int = field(metadata=felt_metadata("stateRoot"))
    number: int
    timestamp: int
    sequencer_address: int = field(metadata=felt_metadata("sequencerAddress"))
    gas_prices: GasPrices = field(metadata=dict(data_key="gasPrices"))
    classes: List[GenesisClass]
    fee_token: FeeTokenConfig = field(metadata=dict(data_key="feeToken"))
    contracts: Dict[int, GenesisContract] = field(
        metadata=dict(
            marshmallow_field=mfields.Dict(
                keys=IntAsHex(),
                values=mfields.Nested(GenesisContract.Schema()),
                required=True,
            )
        )
    )
    accounts: Dict[int, Any] = field(
        default_factory=dict,
        metadata=dict(
            marshmallow_field=mfields.Dict(keys=IntAsHex(), values=mfields.Raw())
        ),
    )

    def dumps(self, **kwargs) -> str:
        return GenesisDocument.Schema().dumps(self, **kwargs)

    @staticmethod
    def loads(data: str) -> "GenesisDocument":
        return GenesisDocument.Schema().loads(data)


@marshmallow_dataclass.dataclass(frozen=True)
class Manifest:
    declarations: Dict[str, int] = field(
        metadata=hex_mapping_metadata(mfields.String())
    )
    deployments: Dict[str, int] = field(metadata=hex_mapping_metadata(mfields.String()))

    def dumps(self, **kwargs) -> str:
        return Manifest.Schema().dumps(self, **kwargs)
