"""Database models."""
from voicebank.models.user import User
from voicebank.models.account import Account
from voicebank.models.card import Card, CardStatus
from voicebank.models.transaction import Transaction

__all__ = ["User", "Account", "Card", "CardStatus", "Transaction"]
