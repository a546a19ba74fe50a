"""Dataset generators and registry."""

from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset
from .xor import CLEAN_XOR, as_arrays, clean_xor_dataset, generate_dataset, noise_fraction

__all__ = [
    "CLEAN_XOR",
    "DatasetSpec",
    "as_arrays",
    "available_datasets",
    "clean_xor_dataset",
    "generate_dataset",
    "get_dataset",
    "noise_fraction",
    "register_dataset",
]
