"""
Synthesis package: reproducible labeled item datasets.

Public API surface:

    make_rng, synthesize_dataset, generate_dataset, latent_probability
"""

from .generator import generate_dataset, latent_probability, make_rng, synthesize_dataset

__all__ = [
    "make_rng",
    "synthesize_dataset",
    "generate_dataset",
    "latent_probability",
]
