from __future__ import annotations

from typing import Callable, Protocol, TypeVar

from vendeai.application.ports.auth_port import AuthPort
from vendeai.application.ports.subscriptions_port import SubscriptionsPort


TAccountsResult = TypeVar("TAccountsResult")


class AccountsPort(AuthPort, SubscriptionsPort, Protocol):
    """Users, sessions and subscriptions served by one store, so account
    creation can open the free subscription in the same transaction."""

    def execute_in_transaction(self, fn: Callable[[AccountsPort], TAccountsResult]) -> TAccountsResult:
        ...
