"""
Global configuration for the nested MuSig2 signing package.

This module contains environment-specific settings that apply across all subspecs.
"""

import os

_SUPPORTED_NESTED_MUSIG_ENVS: list[str] = ["prod", "test"]

NESTED_MUSIG_ENV = os.environ.get("NESTED_MUSIG_ENV", "prod").lower()
"""
The environment flag ('prod' or 'test'). Defaults to 'prod'.

In 'test', the default scheme draws keys and nonces from a seeded generator
so that runs are reproducible. Never sign anything real in that mode.
"""

if NESTED_MUSIG_ENV not in _SUPPORTED_NESTED_MUSIG_ENVS:
    raise ValueError(
        f"Invalid NESTED_MUSIG_ENV environment variable: '{NESTED_MUSIG_ENV}'. "
        f"Supported values: {_SUPPORTED_NESTED_MUSIG_ENVS}"
    )
