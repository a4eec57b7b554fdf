import copy
import logging
import threading
from abc import ABC, abstractmethod
from collections import OrderedDict

from django.conf import settings
from django.core.cache import caches
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class TransactionStore(ABC):
    """Key-value home of transaction records, keyed by client reference.

    Records handed out by ``get``/``list`` are copies; the only way to change
    a stored record is ``put`` or ``update``.
    """

    @abstractmethod
    def get(self, reference):
        ...

    @abstractmethod
    def put(self, reference, record):
        ...

    @abstractmethod
    def update(self, reference, mutator):
        """Apply ``mutator(record)`` and save the result.

        Returns the updated record, or None when the reference is unknown. If
        the mutator raises, the stored record is left as it was.
        """

    @abstractmethod
    def list(self, limit=50):
        """The ``limit`` most recently created records, oldest first."""

    @abstractmethod
    def count(self):
        ...

    def exists(self, reference):
        return self.get(reference) is not None


class InMemoryTransactionStore(TransactionStore):
    """Process-local store. Lost on restart."""

    def __init__(self):
        self._records = OrderedDict()
        self._lock = threading.Lock()

    def get(self, reference):
        record = self._records.get(reference)
        return copy.deepcopy(record) if record is not None else None

    def put(self, reference, record):
        with self._lock:
            self._records[reference] = copy.deepcopy(record)

    def update(self, reference, mutator):
        with self._lock:
            current = self._records.get(reference)
            if current is None:
                return None
            record = copy.deepcopy(current)
            mutator(record)
            self._records[reference] = record
            return copy.deepcopy(record)

    def list(self, limit=50):
        records = list(self._records.values())
        if limit is not None:
            records = records[-limit:] if limit > 0 else []
        return [copy.deepcopy(r) for r in records]

    def count(self):
        return len(self._records)


class CacheTransactionStore(TransactionStore):
    """Store backed by a Django cache, so Redis or a DB cache can hold records.

    Records expire with ``TRANSACTION_CACHE_TIMEOUT``; an index entry keeps
    creation order for listing.
    """

    key_prefix = 'hotspot:txn:'
    index_key = 'hotspot:txn:index'

    def __init__(self, alias='default', timeout=None):
        self.cache = caches[alias]
        self.timeout = timeout if timeout is not None else getattr(settings, 'TRANSACTION_CACHE_TIMEOUT', None)
        self._lock = threading.Lock()

    def _key(self, reference):
        return f'{self.key_prefix}{reference}'

    def get(self, reference):
        return self.cache.get(self._key(reference))

    def put(self, reference, record):
        with self._lock:
            self.cache.set(self._key(reference), record, self.timeout)
            index = self.cache.get(self.index_key) or []
            if reference not in index:
                index.append(reference)
                self.cache.set(self.index_key, index, self.timeout)

    def update(self, reference, mutator):
        with self._lock:
            record = self.cache.get(self._key(reference))
            if record is None:
                return None
            mutator(record)
            self.cache.set(self._key(reference), record, self.timeout)
            return record

    def list(self, limit=50):
        index = self.cache.get(self.index_key) or []
        if limit is not None:
            index = index[-limit:] if limit > 0 else []
        found = self.cache.get_many([self._key(ref) for ref in index])
        return [found[self._key(ref)] for ref in index if self._key(ref) in found]

    def count(self):
        return len(self.cache.get(self.index_key) or [])


_store = None
_store_lock = threading.Lock()


def get_transaction_store():
    """Process-wide store named by the TRANSACTION_STORE setting."""
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                path = getattr(settings, 'TRANSACTION_STORE', 'payments.store.InMemoryTransactionStore')
                _store = import_string(path)()
                logger.info('Transaction store initialised: %s', path)
    return _store


def reset_transaction_store():
    global _store
    with _store_lock:
        _store = None
