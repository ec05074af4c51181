"""
Dead letter envelope decoding and unwrapping.
"""

from .decoder import decode_layer, is_envelope
from .unwrapper import DEFAULT_MAX_DEPTH, unwrap_dead_letter

__all__ = [
    "decode_layer",
    "is_envelope",
    "unwrap_dead_letter",
    "DEFAULT_MAX_DEPTH",
]
