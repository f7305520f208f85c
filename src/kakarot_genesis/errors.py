from typing import List, Tuple


class GenesisError(Exception):
    pass


class MalformedArtifact(GenesisError):
    def __init__(self, reason):
        super().__init__(f"Artifact is neither a Sierra nor a legacy class: {reason}")


class ClassLoadingError(GenesisError):
    def __init__(self, failures: List[Tuple[str, Exception]]):
        self.failures = failures
        lines = [f"{path}: {exc}" for path, exc in failures]
        super().__init__(
            f"Failed to load {len(failures)} class(es):\n" + "\n".join(lines)
        )


class MissingClassHash(GenesisError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"Missing {name} class hash")


class MissingCacheEntry(GenesisError):
    def __init__(self, key):
        self.key = key
        super().__init__(f"Cache miss for {key}")


class MissingAccount(GenesisError):
    def __init__(self, address):
        self.address = address
        super().__init__(f"No account deployed at {hex(address)}")


class KeyDerivationError(GenesisError):
    def __init__(self, reason):
        super().__init__(f"Invalid private key: {reason}")


class ConsumedBuilder(GenesisError):
    def __init__(self):
        super().__init__("Builder was already consumed by a previous operation")


class MissingKakarotContract(GenesisError):
    def __init__(self, address):
        self.address = address
        super().__init__(f"Kakarot contract missing at {hex(address)}")
