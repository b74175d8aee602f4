"""Core AI plumbing for the PEI Assistant.

This package contains the provider abstraction, output guards and audit
logging.  It has ZERO dependency on the form/domain layer or any UI.
"""

__version__ = "0.3.0"
