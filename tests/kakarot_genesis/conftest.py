import copy
import json
import pathlib

import pytest
from starkware.cairo.common.poseidon_hash import poseidon_hash_many
from starkware.starknet.compiler.v1.compile import compile_cairo_to_sierra
from starkware.starknet.core.os.contract_class.compiled_class_hash import (
    compute_compiled_class_hash,
)
from starkware.starknet.services.api.contract_class.contract_class_utils import (
    compile_contract_class,
    load_sierra_from_dict,
)

import kakarot_genesis.artifact as artifact

FIXTURES = pathlib.Path(__file__).parent / "fixtures"

# anvil's first default account, 0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
EVM_ADDRESS = 0xF39FD6E51AAD88F6F4CE6AB8827279CFFFB92266

# anvil's second default account
OTHER_PRIVATE_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"

COINBASE = 0xC0FFEE

KAKAROT_CLASSES = [
    "kakarot",
    "contract_account",
    "externally_owned_account",
    "proxy",
    "precompiles",
]


def sierra_artifact(seed: int):
    """
    A Sierra class as emitted by the compiler, distinct per seed.
    """
    return {
        "sierra_program": [hex(seed), "0x1", "0x2", "0x3"],
        "sierra_program_debug_info": {
            "type_names": [],
            "libfunc_names": [],
            "user_func_names": [],
        },
        "contract_class_version": "0.1.0",
        "entry_points_by_type": {"EXTERNAL": [], "L1_HANDLER": [], "CONSTRUCTOR": []},
        "abi": [],
    }


def write_artifact(path, content):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(content), encoding="utf-8")
    return path


@pytest.fixture
def fake_sierra_compiler(monkeypatch):
    """
    Replaces the Sierra to CASM compiler: the "compiled" class is the
    declared class and its hash is the poseidon hash of the program.
    """
    calls = []

    def compile_contract_class(contract_class, **kwargs):
        calls.append((contract_class, kwargs))
        return contract_class

    def compute_compiled_class_hash(compiled_class):
        return poseidon_hash_many(compiled_class.sierra_program)

    monkeypatch.setattr(artifact, "compile_contract_class", compile_contract_class)
    monkeypatch.setattr(
        artifact, "compute_compiled_class_hash", compute_compiled_class_hash
    )
    return calls


@pytest.fixture
def kakarot_build(tmp_path, fake_sierra_compiler):
    """
    A build directory with the five Kakarot classes, one of them nested.
    """
    build = tmp_path / "build"
    for seed, name in enumerate(KAKAROT_CLASSES, start=0x100):
        directory = build / "accounts" if "account" in name else build
        write_artifact(directory / f"{name}.json", sierra_artifact(seed))
    return build


def legacy_artifact_without_constructor():
    """
    A Cairo 0 class with an empty program whose entry points only list
    EXTERNAL; cairo-lang rejects it while validating the class.
    """
    return {
        "abi": None,
        "entry_points_by_type": {"EXTERNAL": []},
        "program": {
            "prime": "0x800000000000011000000000000000000000000000000000000000000000001",
            "data": [],
            "builtins": [],
            "hints": {},
            "main_scope": "__main__",
            "identifiers": {},
            "reference_manager": {"references": []},
            "attributes": [],
            "debug_info": None,
            "compiler_version": "0.10.3",
        },
    }


def expected_compiled_class_hash(sierra):
    """
    Compiled class hash of a Sierra artifact, computed straight from cairo-lang.
    """
    contract_class = load_sierra_from_dict(copy.deepcopy(sierra))
    compiled_class = compile_contract_class(
        contract_class, allowed_libfuncs_list_name="all"
    )
    return compute_compiled_class_hash(compiled_class)


@pytest.fixture(scope="session")
def compiled_kakarot_classes(tmp_path_factory):
    """
    Real Sierra artifacts for the Kakarot class names, compiled from the identity
    contract with a distinct constant each so that their class hashes differ.
    """
    source = (FIXTURES / "identity.cairo").read_text(encoding="utf-8")
    sources = tmp_path_factory.mktemp("cairo")

    classes = {}
    for value, name in enumerate(KAKAROT_CLASSES, start=1):
        path = sources / f"{name}.cairo"
        path.write_text(
            source.replace("IDENTITY: felt252 = 0;", f"IDENTITY: felt252 = {value};"),
            encoding="utf-8",
        )
        classes[name] = compile_cairo_to_sierra(cairo_path=str(path))
    return classes


@pytest.fixture
def compiled_kakarot_build(tmp_path, compiled_kakarot_classes):
    build = tmp_path / "build"
    for name, sierra in compiled_kakarot_classes.items():
        write_artifact(build / f"{name}.json", sierra)
    return build
