"""painflow: staged AI generation from business problem to deployable agents."""

__version__ = "0.1.0"
