"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements content hashing with pluggable hash algorithms.

HasherImpl streams a file through the algorithm in fixed-size chunks, so memory
use does not depend on file size. Read errors never propagate: the caller gets
FAILED_DIGEST instead.
"""

import hashlib
import logging
from typing import Optional

from amduplicates.core.interfaces import Hasher, HashAlgorithm, HashObject
from amduplicates.core.models import FAILED_DIGEST, DEFAULT_CHUNK_SIZE

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other hashing algorithm
class SHA256AlgorithmImpl(HashAlgorithm):
    name = "sha256"

    def new(self) -> HashObject:
        return hashlib.sha256()


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Produces lowercase hex digests of whole file contents.
    """

    def __init__(self, algorithm: Optional[HashAlgorithm] = None, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.algorithm = algorithm or SHA256AlgorithmImpl()
        self.chunk_size = chunk_size

    def compute_digest(self, path: str) -> str:
        """
        Computes the hex digest of the file at `path`.
        Returns FAILED_DIGEST if the file cannot be opened or read.
        """
        state = self.algorithm.new()
        try:
            with open(path, 'rb') as f:
                while chunk := f.read(self.chunk_size):
                    state.update(chunk)
        except OSError as e:
            logger.debug(f"Could not compute {self.algorithm.name} of {path}: {e}")
            return FAILED_DIGEST
        return state.hexdigest()

