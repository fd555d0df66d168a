"""
MailScout package initializer.
Defines package version; the CLI group lives in :mod:`mail_scout.cli`.
"""
__version__ = "0.1.0"

__all__ = ["__version__"]
