"""solution-forge: scaffolds .NET Aspire + React solutions from templates."""

__version__ = "0.1.0"
