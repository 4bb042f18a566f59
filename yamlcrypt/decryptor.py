"""
Trial decryption across several keys and algorithms.

Keys are tried in the order they were supplied and, for every key, the
algorithms in registry order. The first pair that authenticates wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from . import algorithms as registry
from .errors import DecryptionFailed, InvalidKey, InvalidToken
from .keys import Key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecryptResult:
    plaintext: str
    key: Key
    algorithm: str


def candidate_algorithms(pinned: Optional[str] = None) -> List[str]:
    """Return the pinned algorithm alone, or every registered algorithm."""
    if pinned:
        return [registry.resolve_algorithm(pinned)]
    return registry.list_algorithms()


def try_decrypt(
    algorithms: Sequence[str],
    keys: Sequence[Key],
    token: str,
) -> DecryptResult:
    """
    Decrypt token with the first matching (key, algorithm) pair.

    Raises:
        DecryptionFailed: if no pair succeeds
    """

    for index, key in enumerate(keys):
        for algorithm in algorithms:
            if not registry.recognizes(algorithm, token):
                logger.debug("%s does not recognize token, skipping", algorithm)
                continue
            try:
                plaintext = registry.decrypt(algorithm, key.material, token)
            except InvalidKey:
                logger.debug("key #%d (%s) is not a valid %s key", index, key.describe(), algorithm)
                continue
            except InvalidToken:
                logger.debug("key #%d (%s) failed with %s", index, key.describe(), algorithm)
                continue
            return DecryptResult(plaintext=plaintext, key=key, algorithm=algorithm)

    raise DecryptionFailed("no matching key to decrypt the given data!")
