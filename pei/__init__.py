"""PEI Assistant: AI-assisted drafting of Individualized Education Plans."""

__version__ = "0.3.0"
