from raffle_toolkit.utils.cache import (
    ResultCache,
    address_list_key,
    collection_key,
)

__all__ = [
    "ResultCache",
    "address_list_key",
    "collection_key",
]
