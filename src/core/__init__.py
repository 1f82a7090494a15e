"""Core module for the JMRL pool.

Note: Imports are lazy to avoid circular dependencies.
Import directly from submodules instead of from this __init__.py.
"""

# Lazy imports - these are available but only loaded when accessed
__all__ = [
    "JMRLClient",
    "TokenCache",
    "UpstreamError",
    "Settings",
    "settings",
    "MalformedQueryError",
    "TranslatedQuery",
    "UnsupportedQueryError",
    "translate",
    "MissingRequiredFieldError",
    "extract",
    "normalize",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name in ("JMRLClient", "TokenCache", "UpstreamError"):
        from src.core import jmrl_client
        return getattr(jmrl_client, name)
    elif name in ("Settings", "settings"):
        from src.core import config
        return getattr(config, name)
    elif name in ("MalformedQueryError", "TranslatedQuery", "UnsupportedQueryError", "translate"):
        from src.core import query_translator
        return getattr(query_translator, name)
    elif name in ("MissingRequiredFieldError", "extract"):
        from src.core import marc
        return getattr(marc, name)
    elif name == "normalize":
        from src.core.normalizer import normalize
        return normalize
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
