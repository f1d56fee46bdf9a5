"""Localized error messages."""

from unveil.i18n.catalog import DEFAULT_LANGUAGE, Message, MessageCatalog


__all__ = ["DEFAULT_LANGUAGE", "Message", "MessageCatalog"]
