"""Declaration store: the set of declarations for one configuration load."""

import logging
from typing import Iterable, Iterator

from ..core.errors import DuplicateIdentifierError, NotFoundError
from ..core.models import ResourceAddress, ResourceDeclaration

logger = logging.getLogger(__name__)


class DeclarationStore:
    """Append-only collection of resource declarations keyed by address.

    Declarations are deep-copied on the way in and on the way out, so
    neither the caller's original nor anything returned by get() or
    iteration can alter what the store holds.
    """

    def __init__(self, declarations: Iterable[ResourceDeclaration] = ()):
        self._declarations: dict[ResourceAddress, ResourceDeclaration] = {}
        for decl in declarations:
            self.add(decl)

    def add(self, declaration: ResourceDeclaration) -> ResourceDeclaration:
        """Add a declaration.

        Raises:
            DuplicateIdentifierError: If the address is already present
        """
        address = declaration.address
        if address in self._declarations:
            raise DuplicateIdentifierError(address)
        stored = declaration.model_copy(deep=True)
        self._declarations[address] = stored
        logger.debug("Added declaration %s (%s)", address, stored.strategy)
        return stored.model_copy(deep=True)

    def get(self, address: ResourceAddress | str) -> ResourceDeclaration:
        """Look up a declaration by address or "type.name" string.

        Raises:
            NotFoundError: If no such declaration exists
        """
        try:
            key = ResourceAddress.parse(address)
        except ValueError:
            raise NotFoundError(address) from None
        try:
            stored = self._declarations[key]
        except KeyError:
            raise NotFoundError(key) from None
        return stored.model_copy(deep=True)

    def addresses(self) -> list[ResourceAddress]:
        return list(self._declarations)

    def __contains__(self, address: object) -> bool:
        if isinstance(address, str):
            try:
                address = ResourceAddress.parse(address)
            except ValueError:
                return False
        return address in self._declarations

    def __iter__(self) -> Iterator[ResourceDeclaration]:
        for stored in self._declarations.values():
            yield stored.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._declarations)
