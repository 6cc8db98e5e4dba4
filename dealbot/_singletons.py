# dealbot/_singletons.py
from functools import lru_cache
from .catalog import load_catalog

@lru_cache(maxsize=1)
def get_catalog():
    # tuple of frozen CatalogEntry, shared read-only by every request
    return load_catalog()
