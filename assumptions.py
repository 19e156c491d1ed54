# assumptions.py
from __future__ import annotations
from typing import Callable, Iterator, List

from card_errors import UnregisteredProviderError

AssumptionsProvider = Callable[[], List[int]]


class AssumptionsRegistry:
    """
    Providers of per-solve assumption literals.

    collect() is called right before each solve() without explicit
    assumptions and concatenates every provider's current output in
    registration order.
    """

    def __init__(self) -> None:
        self._providers: List[AssumptionsProvider] = []

    def register(self, provider: AssumptionsProvider) -> None:
        self._providers.append(provider)

    def unregister(self, provider: AssumptionsProvider) -> None:
        try:
            self._providers.remove(provider)
        except ValueError:
            raise UnregisteredProviderError(f"Provider {provider!r} is not registered.") from None

    def clear(self) -> None:
        self._providers.clear()

    def collect(self) -> List[int]:
        out: List[int] = []
        for provider in self._providers:
            out.extend(provider())
        return out

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, provider) -> bool:
        return provider in self._providers

    def __iter__(self) -> Iterator[AssumptionsProvider]:
        return iter(list(self._providers))
