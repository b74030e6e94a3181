"""Allow running pva as ``python -m pva``."""

from pva.cli import app

app(prog_name="pva")
