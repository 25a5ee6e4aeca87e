"""Centralised factories for the planner's random number generators."""

from __future__ import annotations

from dataclasses import dataclass, field
import hashlib
from typing import Callable, Dict

from numpy.random import BitGenerator, Generator, PCG64

BitGeneratorFactory = Callable[[int], BitGenerator]


def _default_bit_generator(seed: int) -> BitGenerator:
    return PCG64(seed)


_BITGEN_MODULUS = 2**128


def _stable_hash(value: str, *, modulo: int) -> int:
    """Return a deterministic hash of ``value`` bounded by ``modulo``."""

    digest = hashlib.blake2b(value.encode("utf-8"), digest_size=16).digest()
    return int.from_bytes(digest, "big") % modulo


@dataclass
class AIRandomness:
    """Provides seeded RNG streams, one per decision domain."""

    seed: int
    bit_generator_factory: BitGeneratorFactory = _default_bit_generator
    _generators: Dict[str, Generator] = field(default_factory=dict)

    def _derive_seed(self, namespace: str) -> int:
        token = f"{self.seed}:{namespace}"
        derived = _stable_hash(token, modulo=_BITGEN_MODULUS)
        return derived or 1

    def generator(self, stream: str = "default") -> Generator:
        """Return (and cache) a ``numpy.random.Generator`` for ``stream``."""

        if stream not in self._generators:
            derived_seed = self._derive_seed(f"rng:{stream}")
            bit_gen = self.bit_generator_factory(int(derived_seed))
            self._generators[stream] = Generator(bit_gen)
        return self._generators[stream]

    def random_int(self, stream: str, upper: int) -> int:
        """Draw an integer in ``[0, upper)`` from ``stream``."""

        if upper <= 0:
            raise ValueError("upper must be positive")
        return int(self.generator(stream).integers(upper))


__all__ = ["AIRandomness"]
