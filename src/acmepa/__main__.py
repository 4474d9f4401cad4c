"""Allow ``python -m acmepa``."""

from acmepa.cli.main import main

main()
