"""Allow ``python -m portal_joiner``."""

from portal_joiner.main import run

run()
