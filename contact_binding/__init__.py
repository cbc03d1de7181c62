"""Contact resolution and binding for entity-relationship edit forms."""

__version__ = "0.1.0"
