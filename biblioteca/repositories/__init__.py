"""
Persistence adapters.

The local store (JSON file or SQL key-value table) and the remote store
(hosted REST backend) share one contract; StoreProvider picks between them.
Controllers depend on the provider rather than on either store.
"""
