"""iCore: faceted search over the biographical interview corpus."""

__version__ = "1.0.0"
