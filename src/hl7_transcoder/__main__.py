"""Entry point for running hl7_transcoder as a module.

This allows the package to be executed as:
    python -m hl7_transcoder
"""

from hl7_transcoder.cli.main import cli

if __name__ == "__main__":
    cli()
