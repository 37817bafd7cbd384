"""API controllers for the web layer."""

from massaswap.web.controllers import quotes, swaps, tokens

__all__ = ["quotes", "swaps", "tokens"]
