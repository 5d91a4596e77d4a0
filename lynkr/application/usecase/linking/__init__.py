"""Account-linking use cases."""

from .begin_handshake import BeginHandshakeUseCase
from .complete_handshake import CompleteHandshakeUseCase
from .complete_reauth import CompleteReauthUseCase
from .list_linked_accounts import ListLinkedAccountsUseCase
from .process_link import ProcessLinkUseCase
from .start_link import StartLinkUseCase
from .unlink_account import UnlinkAccountUseCase

__all__ = [
    "StartLinkUseCase",
    "CompleteReauthUseCase",
    "BeginHandshakeUseCase",
    "CompleteHandshakeUseCase",
    "ProcessLinkUseCase",
    "ListLinkedAccountsUseCase",
    "UnlinkAccountUseCase",
]
