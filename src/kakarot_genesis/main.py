# reads a genesis config json from stdin, writes the katana genesis json to stdout
# example: kakarot-genesis manifest.json < config.json > genesis.json
#
# {
#     "classes_path": "build/",
#     "coinbase": "0x123",
#     "accounts": [{"private_key": "0xac09...ff80", "amount": "0xde0b6b3a7640000"}]
# }

import sys
from dataclasses import field
from typing import List, Optional

import marshmallow.exceptions
import marshmallow_dataclass
from starkware.starkware_utils.marshmallow_dataclass_fields import IntAsHex

from .builder import GenesisBuilder
from .errors import GenesisError
from .logger import Logger


@marshmallow_dataclass.dataclass(frozen=True)
class AccountConfig:
    private_key: str
    amount: Optional[int] = field(
        default=None, metadata=dict(marshmallow_field=IntAsHex(allow_none=True))
    )


@marshmallow_dataclass.dataclass(frozen=True)
class GenesisConfig:
    classes_path: str
    coinbase: int = field(metadata=dict(marshmallow_field=IntAsHex(required=True)))
    accounts: List[AccountConfig] = field(default_factory=list)


def generate(config: GenesisConfig):
    """
    Runs the builder over a config, returns (genesis, manifest).
    """
    builder = (
        GenesisBuilder().load_classes(config.classes_path).deploy_kakarot(config.coinbase)
    )

    for account in config.accounts:
        builder = builder.add_account(account.private_key)
        if account.amount is not None:
            builder = builder.fund(account.private_key, account.amount)

    manifest = builder.manifest()
    return (builder.build(), manifest)


def main():
    if len(sys.argv) > 2:
        print(
            "usage: kakarot-genesis [manifest.json] < config.json > genesis.json",
            file=sys.stderr,
        )
        sys.exit(1)

    logger = Logger()

    sys.stdin.reconfigure(encoding="utf-8")
    sys.stdout.reconfigure(encoding="utf-8")

    try:
        config = GenesisConfig.Schema().loads(sys.stdin.read())
    except marshmallow.exceptions.MarshmallowError as exc:
        logger.failure("Failed to parse config", exc)
        sys.exit(1)

    try:
        (genesis, manifest) = generate(config)
    except (GenesisError, ValueError) as exc:
        logger.failure("Failed to build genesis", exc)
        sys.exit(1)

    if len(sys.argv) == 2:
        with open(sys.argv[1], "w", encoding="utf-8") as f:
            f.write(manifest.dumps(indent=2))

    print(genesis.dumps(indent=2), flush=True)
    sys.exit(0)


if __name__ == "__main__":
    main()
