"""
Data preparation: normalizing raw deal input, validation, loading from JSON.
"""

from .loader import load_deal_json
from .normalize import canonicalize_keys, is_deal_key, normalize_deal_input
from .validators import ValidationResult, validate_deal

__all__ = [
    "load_deal_json",
    "canonicalize_keys",
    "is_deal_key",
    "normalize_deal_input",
    "ValidationResult",
    "validate_deal",
]
