import json
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from .artifact import compute_class_hash
from .constants import MAX_WORKERS
from .errors import ClassLoadingError
from .logger import Logger


@dataclass(frozen=True)
class DeclaredClass:
    name: str
    path: str
    artifact: Dict[str, Any]
    class_hash: Optional[int] = None


def load_classes(
    path, max_workers: Optional[int] = MAX_WORKERS
) -> Tuple[List[DeclaredClass], Dict[str, int]]:
    """
    Reads and hashes every artifact under `path`.

    Returns the declared classes ordered by path and the mapping from class
    name (the file stem) to class hash. Every file is attempted; failures are
    reported together once the pool has been joined.
    """
    logger = Logger("loader")

    path = os.fspath(path)
    if not os.path.isdir(path):
        raise ClassLoadingError([(path, NotADirectoryError("not a directory"))])

    paths = sorted(artifact_paths(path, logger))

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [(p, executor.submit(load_class, p)) for p in paths]

    classes = []
    failures = []
    for artifact_path, future in futures:
        try:
            declared = future.result()
        except Exception as exc:
            # reported with the other failures once every file was tried
            failures.append((artifact_path, exc))
            continue

        logger.trace(f"{declared.name} {hex(declared.class_hash)}")
        classes.append(declared)

    class_hashes = {}
    for declared in classes:
        if declared.name in class_hashes:
            duplicate = ValueError(f"duplicate class name {declared.name}")
            failures.append((declared.path, duplicate))
            continue
        class_hashes[declared.name] = declared.class_hash

    if failures:
        raise ClassLoadingError(sorted(failures, key=lambda failure: failure[0]))

    logger.info(f"loaded {len(classes)} classes from {path}")
    return (classes, class_hashes)


def artifact_paths(root: str, logger: Logger):
    """
    Yields the regular files under root. Symlinks and directories which cannot
    be listed are skipped.
    """

    def skip(exc: OSError):
        logger.debug(f"skipping {exc.filename}: {exc.strerror}")

    for dirpath, _, filenames in os.walk(root, onerror=skip):
        for filename in filenames:
            candidate = os.path.join(dirpath, filename)
            if os.path.islink(candidate) or not os.path.isfile(candidate):
                logger.debug(f"skipping {candidate}: not a regular file")
                continue
            yield candidate


def load_class(path: str) -> DeclaredClass:
    with open(path, encoding="utf-8") as f:
        artifact = json.load(f)

    name = os.path.splitext(os.path.basename(path))[0]
    declared = DeclaredClass(name=name, path=path, artifact=artifact)

    return replace(declared, class_hash=compute_class_hash(artifact))
