"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping, Tuple

from ..core.types import DataPoint
from .xor import clean_xor_dataset, generate_dataset


@dataclass(frozen=True)
class DatasetSpec:
    """A materialised dataset plus the options needed to rebuild it.

    Attributes
    ----------
    name:
        Registry identifier.
    points:
        The samples in generation order.
    d_in, d_out:
        Input and target widths, used to validate the model topology.
    provenance:
        Options the factory was called with; written to run manifests.
    """

    name: str
    points: Tuple[DataPoint, ...]
    d_in: int
    d_out: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.points)


DatasetFactory = Callable[..., DatasetSpec]

_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory, directly or as a decorator."""

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(name: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` built by the factory registered as ``name``."""

    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}")
    spec = _REGISTRY[name](**options)
    if not spec.points:
        raise ValueError(f"Dataset {name!r} produced no samples")
    return spec


def available_datasets() -> Iterable[str]:
    return sorted(_REGISTRY)


@register_dataset("noisy_xor")
def _noisy_xor(num_samples: int = 100, noise_level: float = 0.0, seed: int = 42) -> DatasetSpec:
    points = generate_dataset(num_samples, noise_level, seed)
    return DatasetSpec(
        name="noisy_xor",
        points=points,
        d_in=2,
        d_out=1,
        provenance={
            "type": "noisy_xor",
            "num_samples": int(num_samples),
            "noise_level": float(noise_level),
            "seed": int(seed),
        },
    )


@register_dataset("clean_xor")
def _clean_xor(**_: object) -> DatasetSpec:
    return DatasetSpec(
        name="clean_xor",
        points=clean_xor_dataset(),
        d_in=2,
        d_out=1,
        provenance={"type": "clean_xor"},
    )


__all__ = ["DatasetSpec", "available_datasets", "get_dataset", "register_dataset"]
