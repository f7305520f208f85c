import json
from typing import Any, Dict

import marshmallow.exceptions
from starkware.starknet.core.os.contract_class.compiled_class_hash import (
    compute_compiled_class_hash,
)
from starkware.starknet.core.os.contract_class.deprecated_class_hash import (
    compute_deprecated_class_hash,
)
from starkware.starknet.services.api.contract_class.contract_class import (
    ContractClass,
    DeprecatedCompiledClass,
)
from starkware.starknet.services.api.contract_class.contract_class_utils import (
    compile_contract_class,
)
from starkware.starkware_utils.error_handling import StarkException

from .constants import ALLOWED_LIBFUNCS_LIST_NAME
from .errors import MalformedArtifact

# compiler outputs carry debug info and other fields the declared class does not
SIERRA_FIELDS = [
    "sierra_program",
    "contract_class_version",
    "entry_points_by_type",
    "abi",
]

# loading also validates in post_init hooks, which raise plain errors or
# StarkException (e.g. a legacy class without constructor entry points)
PARSE_ERRORS = (
    marshmallow.exceptions.MarshmallowError,
    AssertionError,
    KeyError,
    TypeError,
    ValueError,
    StarkException,
)


def compute_class_hash(artifact: Dict[str, Any]) -> int:
    """
    Computes the class hash of a raw artifact.

    Sierra classes are compiled to CASM and hashed with the compiled class
    hash; anything that does not parse as Sierra is tried as a Cairo 0 class.
    Any other failure is reported as a MalformedArtifact.
    """
    try:
        contract_class = load_sierra(artifact)
    except PARSE_ERRORS as sierra_exc:
        return legacy_class_hash(artifact, sierra_exc)

    try:
        compiled_class = compile_contract_class(
            contract_class,
            allowed_libfuncs_list_name=ALLOWED_LIBFUNCS_LIST_NAME,
        )
        return compute_compiled_class_hash(compiled_class)
    except Exception as exc:
        raise MalformedArtifact(f"sierra class failed to compile: {exc}") from exc


def legacy_class_hash(artifact: Dict[str, Any], sierra_exc: Exception) -> int:
    try:
        deprecated_class = load_legacy(artifact)
    except PARSE_ERRORS as legacy_exc:
        raise MalformedArtifact(
            f"sierra: {sierra_exc}; legacy: {legacy_exc}"
        ) from legacy_exc

    try:
        return compute_deprecated_class_hash(deprecated_class)
    except Exception as exc:
        raise MalformedArtifact(f"legacy class failed to hash: {exc}") from exc


def load_sierra(artifact: Dict[str, Any]) -> ContractClass:
    if not isinstance(artifact, dict) or "sierra_program" not in artifact:
        raise marshmallow.exceptions.ValidationError("missing sierra_program")

    data = {key: artifact[key] for key in SIERRA_FIELDS if key in artifact}

    # the gateway format has the abi as a string, compilers emit a list
    if not isinstance(data.get("abi", ""), str):
        data["abi"] = json.dumps(data["abi"])

    return ContractClass.load(data)


def load_legacy(artifact: Dict[str, Any]) -> DeprecatedCompiledClass:
    if not isinstance(artifact, dict) or "program" not in artifact:
        raise marshmallow.exceptions.ValidationError("missing program")

    return DeprecatedCompiledClass.load(artifact)
