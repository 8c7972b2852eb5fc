# File: backend/vbodegas/services/contract_errors.py
"""Errors raised by contract generation. Anything else is absorbed and logged."""


class ContractError(Exception):
    """Base class for fatal contract-generation failures."""

    status_code = 500


class TemplateError(ContractError):
    """The template PDF is missing, unreadable or not a PDF."""

    status_code = 500


class SectionSelectionError(ContractError):
    """A non-empty section selection resolved to zero template pages."""

    status_code = 400


class LayoutError(ContractError):
    """The coordinate/section layout is malformed."""

    status_code = 500
